import logging
from pathlib import Path

import platformdirs
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ClassifierConfig(BaseModel):
    extension_ratio: float = Field(
        1.3, description="Min ratio of wrist-tip over wrist-knuckle distance for a finger to be extended"
    )
    pinch_threshold: float = Field(0.05, description="Max thumb tip to index tip distance for a pinch")
    default_pointer: tuple[float, float, float] = Field(
        (0.5, 0.5, 0.0), description="Pointer reported when no hand is present"
    )


class EngineConfig(BaseModel):
    tick_seconds: float = Field(0.016, description="Fixed duration of one render tick (seconds)")
    launch_y: float = Field(-60.0, description="Off-screen height every rocket starts from")
    rocket_speed_min: float = Field(0.8, description="Min rocket ascent per tick")
    rocket_speed_max: float = Field(1.2, description="Max rocket ascent per tick")
    trail_length: float = Field(8.0, description="Length of the rocket trail below its head")
    trail_head_spread: float = Field(0.05, description="Lateral spread of particles at the rocket head")
    trail_tail_spread: float = Field(0.4, description="Extra lateral spread at the end of the trail")
    trail_lag_exponent: float = Field(6.0, description="Exponent applied to the random lag of trail particles")
    trail_white_threshold: float = Field(0.02, description="Lag curve below which trail particles are white")
    trail_dim_factor: float = Field(0.6, description="Brightness of trail particles away from the head")
    burst_speed_min: float = Field(0.3, description="Min initial outward speed of burst particles")
    burst_speed_max: float = Field(1.5, description="Max initial outward speed of burst particles")
    burst_damping: float = Field(0.9, description="Velocity multiplier applied each tick while exploding")
    explode_duration: float = Field(0.6, description="Duration of the burst before weaving (seconds)")
    weave_duration: float = Field(2.4, description="Duration of the weave into the target shape (seconds)")
    weave_pull: float = Field(0.1, description="Fraction of the remaining distance covered per tick at start")
    weave_jitter_base: float = Field(0.02, description="Jitter magnitude at the start of the weave")
    weave_jitter_growth: float = Field(0.1, description="Jitter magnitude added at the end of the weave")
    weave_fade_start: float = Field(0.6, description="Weave progress after which opacity starts dropping")
    weave_end_opacity: float = Field(0.5, description="Opacity reached at the end of the weave")
    fade_step: float = Field(0.02, description="Opacity lost per tick while fading")
    fade_drift: float = Field(0.05, description="Downward drift per tick while fading")
    fade_jitter: float = Field(0.15, description="Lateral jitter magnitude while fading")
    rocket_point_size: float = Field(0.25, description="Point size during the rocket phase")
    burst_point_size: float = Field(0.18, description="Point size after the burst")


class ShapesConfig(BaseModel):
    font_size: int = Field(100, description="Font size (pixels) used to rasterize text")
    line_height: float = Field(1.5, description="Bitmap height as a multiple of the font size")
    alpha_threshold: int = Field(128, description="Min alpha (0-255) for a pixel to become a point")
    z_jitter: float = Field(1.0, description="Width of the random depth range centered on zero")
    parametric_points: int = Field(3000, description="Number of points sampled on parametric shapes")
    heart_scale: float = Field(1.2, description="Multiplier applied to the heart curve")
    star_outer_radius: float = Field(20.0, description="Radius of the star tips")
    star_inner_radius: float = Field(8.0, description="Radius of the star inner corners")
    fonts: list[str] = Field(
        default_factory=lambda: [
            "NotoSansCJK-Bold.ttc",
            "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
            "/System/Library/Fonts/PingFang.ttc",
            "msyhbd.ttc",
            "simhei.ttf",
            "DejaVuSans-Bold.ttf",
        ],
        description="Font files tried in order, the bundled Pillow font being the last resort",
    )


class InteractionConfig(BaseModel):
    heart_cooldown: float = Field(1.5, description="Min delay (seconds) since the last trigger for V_SIGN")
    finale_cooldown: float = Field(3.0, description="Min delay (seconds) since the last trigger for OK_SIGN")
    finale_count: int = Field(6, description="Number of fireworks launched by the finale")
    finale_stagger: float = Field(0.2, description="Delay (seconds) between two finale fireworks")
    finale_texts: list[str] = Field(
        default_factory=lambda: ["福", "春", "喜", "✨", "2026", "✦", "★"],
        description="Texts picked at random for finale fireworks",
    )
    finale_spread_x: float = Field(80.0, description="Width of the area finale fireworks are placed in")
    finale_spread_y: float = Field(40.0, description="Height of the area finale fireworks are placed in")
    finale_scale: float = Field(0.25, description="Text scale of finale fireworks")
    special_shape_scale: float = Field(1.0, description="Scale of special shapes")
    zoom_step: float = Field(0.2, description="Camera distance change per tick while zooming")
    min_distance: float = Field(10.0, description="Closest camera distance")
    max_distance: float = Field(120.0, description="Farthest camera distance")
    initial_distance: float = Field(50.0, description="Camera distance at startup")
    fov_degrees: float = Field(60.0, description="Vertical field of view of the camera")


class ShowConfig(BaseModel):
    phrases: list[str] = Field(
        default_factory=lambda: ["2026", "祝大家", "新年快乐", "马到成功"],
        description="Phrases cycled through by the scripted show",
    )
    display_duration: float = Field(4.0, description="Time (seconds) each phrase is shown before the next")
    short_phrase_length: int = Field(2, description="Max length of a phrase rendered with the large scale")
    short_phrase_scale: float = Field(0.35, description="Text scale of short phrases")
    long_phrase_scale: float = Field(0.25, description="Text scale of longer phrases")
    initial_palette: int = Field(1, description="Index of the palette used at startup")
    seed: int | None = Field(None, description="Seed of the random generator, None for a random one")


class CLIConfig(BaseModel):
    """Configuration for CLI settings."""

    camera: int = Field(0, description="OpenCV index of the camera to capture from")
    mirror: bool = Field(True, description="Mirror the camera thumbnail horizontally")
    size: int = Field(640, description="Maximum dimension for camera capture resolution")
    window_width: int = Field(1280, description="Width of the preview window")
    window_height: int = Field(720, description="Height of the preview window")
    log_level: str = Field("INFO", description="Logging level of the CLI")


class Config(BaseModel):
    classifier: ClassifierConfig = Field(
        default_factory=lambda: ClassifierConfig(), description="Gesture classification configuration"
    )
    engine: EngineConfig = Field(default_factory=lambda: EngineConfig(), description="Particle engine configuration")
    shapes: ShapesConfig = Field(default_factory=lambda: ShapesConfig(), description="Shape rasterizer configuration")
    interaction: InteractionConfig = Field(
        default_factory=lambda: InteractionConfig(), description="Gesture to action mapping configuration"
    )
    show: ShowConfig = Field(default_factory=lambda: ShowConfig(), description="Scripted show configuration")
    cli: CLIConfig = Field(default_factory=lambda: CLIConfig(), description="CLI configuration")

    @classmethod
    def get_user_path(cls) -> Path:
        app_name = "gesture-fireworks"
        config_dir = Path(platformdirs.user_config_dir(app_name))
        return config_dir / "config.json"

    @classmethod
    def validate_path(cls, path: Path | str | None) -> Path:
        if path is None:
            path = cls.get_user_path()
        elif isinstance(path, str):
            path = Path(path)

        return path.resolve()

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        path = cls.validate_path(path)

        if path.exists() and not path.is_file():
            raise ValueError(f"Path {path} exists and is not a file.")

        if not path.exists():
            logger.info("Config file %s does not exist. Using default config.", path)
            return cls()

        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.error("Error loading config from %s: %s", path, exc)
            logger.error("Using default config.")
            return cls()

    def save(self, path: Path | str | None = None) -> Path:
        path = self.validate_path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.exists() and not path.is_file():
            raise ValueError(f"Path {path} exists and is not a file.")

        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

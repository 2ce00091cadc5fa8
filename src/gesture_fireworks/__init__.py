"""Hand-gesture driven particle firework show."""

from .classifier import GestureClassifier, classify_hand
from .config import Config
from .engine import FireworkState, ParticleSystem, ParticleSystemRegistry, RenderBuffers
from .gestures import Gestures, Shapes
from .interaction import Actions, InteractionMapper, ShowSequencer
from .models import HandLandmark, HandState, Landmark
from .palettes import PALETTES, Palette
from .shapes import ShapeRasterizer, TargetShape
from .show import EngineContext, FireworkShow
from .viewport import Viewport

__all__ = [
    # Core classes
    "FireworkShow",
    "EngineContext",
    "GestureClassifier",
    "classify_hand",
    "InteractionMapper",
    "ShowSequencer",
    # Particles
    "FireworkState",
    "ParticleSystem",
    "ParticleSystemRegistry",
    "RenderBuffers",
    "ShapeRasterizer",
    "TargetShape",
    "Palette",
    "PALETTES",
    "Viewport",
    # Models
    "HandLandmark",
    "HandState",
    "Landmark",
    # Enums
    "Actions",
    "Gestures",
    "Shapes",
    # Configuration
    "Config",
]

from .particles import FireworkState, ParticleSystem, RenderBuffers
from .registry import ParticleSystemRegistry

__all__ = [
    "FireworkState",
    "ParticleSystem",
    "ParticleSystemRegistry",
    "RenderBuffers",
]

"""Read and write DMS triangle-strip models, reduce keyframes and inspect DTEX textures."""

__version__ = "0.1.0"

__all__ = [
    "dms_format",
    "keyframes",
    "playback",
    "raymath",
    "scene",
    "strips",
    "textures",
]
"""Backend generation engine."""

from .pipeline import Artifact, GenerationResult, compile_diagram, generate_backend
from .writer import java_source_root, write_artifacts

__all__ = [
    "Artifact",
    "GenerationResult",
    "compile_diagram",
    "generate_backend",
    "java_source_root",
    "write_artifacts",
]

"""
umlheal: validation and self-healing for model-generated PlantUML sequence diagrams.

Usage:
    from umlheal import heal_diagrams

    for diagram in heal_diagrams(generated_text):
        print(diagram.to_plantuml())
"""

__version__ = "1.0.0"

from .fragment_extractor import FragmentExtractor, RawFragment, extract_fragments, strip_fragments
from .plantuml_sanitizer import sanitize
from .plantuml_validator import InvalidReason, ValidationResult, validate_plantuml
from .healing import DiagramHealer, HealingResult, HealingState
from .pipeline import DiagramPipeline, heal_diagrams

__all__ = [
    "FragmentExtractor",
    "RawFragment",
    "extract_fragments",
    "strip_fragments",
    "sanitize",
    "InvalidReason",
    "ValidationResult",
    "validate_plantuml",
    "DiagramHealer",
    "HealingResult",
    "HealingState",
    "DiagramPipeline",
    "heal_diagrams",
]

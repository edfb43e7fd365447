"""
umlheal Tools Package

External collaborators used after a diagram has been finalized.
"""

from .plantuml_renderer import PlantUMLRenderer, get_plantuml_renderer

__all__ = ["PlantUMLRenderer", "get_plantuml_renderer"]

"""
Diagram generation service: heal every fragment in generated text, then
render each healed diagram to PNG.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .config import HealingConfig, get_healing_config
from .pipeline import DiagramPipeline
from .tools.plantuml_renderer import PlantUMLRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedDiagram:
    ordinal: int
    title: str
    png: bytes


def generate_diagrams(
    text: str,
    config: Optional[HealingConfig] = None,
    pipeline: Optional[DiagramPipeline] = None,
    renderer: Optional[PlantUMLRenderer] = None,
) -> List[RenderedDiagram]:
    """
    Heal and render the diagrams found in text.

    Healing always yields one diagram per fragment; rendering can still fail
    (no Java, renderer error, tiny image), in which case the diagram is logged
    and skipped.
    """
    config = config or get_healing_config()
    pipeline = pipeline or DiagramPipeline(config=config)
    renderer = renderer or PlantUMLRenderer(config=config)

    results = pipeline.process(text)
    logger.info(f"🎨 Starting diagram rendering for {len(results)} diagrams...")

    rendered = []
    for result in results:
        diagram = result.diagram
        png = renderer.render_png(diagram.to_plantuml())
        if png is not None:
            logger.info(f"✅ Rendered diagram {result.ordinal}: \"{diagram.title}\" ({len(png)} bytes)")
            rendered.append(RenderedDiagram(ordinal=result.ordinal, title=diagram.title, png=png))
        else:
            logger.warning(f"❌ Failed to render diagram {result.ordinal}: \"{diagram.title}\"")

    logger.info(f"🎨 Diagram rendering complete: {len(rendered)}/{len(results)} successful")
    return rendered

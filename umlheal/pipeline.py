"""
Diagram Healing Pipeline

Extracts every fragment from generated text and heals each one. Fragments
are independent, so they may be healed on a thread pool; results always come
back in fragment order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .config import HealingConfig, get_healing_config
from .fragment_extractor import FragmentExtractor
from .healing import DiagramHealer, HealingResult
from .schemas import Diagram

logger = logging.getLogger(__name__)


class DiagramPipeline:
    """Fragment extraction followed by per-fragment healing"""

    def __init__(self, config: Optional[HealingConfig] = None, healer: Optional[DiagramHealer] = None):
        self.config = config or get_healing_config()
        self.healer = healer or DiagramHealer(config=self.config)

    def process(self, text: str) -> List[HealingResult]:
        """Heal every non-blank fragment of text, in ordinal order."""
        fragments = [fragment for fragment in FragmentExtractor(text) if not fragment.is_blank]
        if not fragments:
            return []

        workers = self.config.parallel_workers
        if workers > 0 and len(fragments) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self.healer.heal, fragments))
        else:
            results = [self.healer.heal(fragment) for fragment in fragments]

        fallbacks = sum(1 for result in results if result.fallback_used)
        logger.info(
            f"🎨 Diagram healing complete: {len(results) - fallbacks}/{len(results)} healed, "
            f"{fallbacks} replaced by fallback"
        )
        return results

    def diagrams(self, text: str) -> List[Diagram]:
        return [result.diagram for result in self.process(text)]


def heal_diagrams(text: str, config: Optional[HealingConfig] = None) -> List[Diagram]:
    """
    Convenience function returning one valid Diagram per non-blank fragment

    Args:
        text: Generated text containing marker-delimited fragments
        config: Optional configuration (defaults to the environment)

    Returns:
        Diagrams in fragment order
    """
    return DiagramPipeline(config=config).diagrams(text)

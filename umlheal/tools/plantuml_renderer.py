"""
PlantUML PNG Renderer

Thin wrapper around the PlantUML jar. Rendering failures are never raised:
a missing Java runtime, a failing or hanging process and an image no larger
than `min_png_bytes` all return None so callers can skip the diagram.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from ..config import HealingConfig, get_healing_config

logger = logging.getLogger(__name__)


class PlantUMLRenderer:
    """Renders PlantUML source to PNG bytes via `java -jar plantuml.jar`."""

    def __init__(self, config: Optional[HealingConfig] = None):
        self.config = config or get_healing_config()
        self._java_available: Optional[bool] = None

    def is_available(self) -> bool:
        """Check (once) that the Java runtime can be launched"""
        if self._java_available is None:
            try:
                result = subprocess.run(
                    [self.config.java_command, "-version"],
                    capture_output=True,
                    timeout=self.config.render_timeout_seconds,
                )
                self._java_available = result.returncode == 0
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.warning(f"⚠️ Java not found ({e}). Install Java to enable diagram rendering.")
                self._java_available = False
        return self._java_available

    def render_png(self, plantuml_code: str) -> Optional[bytes]:
        """
        Render PlantUML source to PNG.

        Args:
            plantuml_code: Complete marker-delimited PlantUML source

        Returns:
            PNG bytes, or None when rendering is unavailable or fails
        """
        if not self.is_available():
            return None

        with tempfile.TemporaryDirectory(prefix="umlheal-") as workdir:
            source_path = Path(workdir) / "diagram.puml"
            png_path = source_path.with_suffix(".png")
            source_path.write_text(plantuml_code, encoding="utf-8")

            try:
                result = subprocess.run(
                    [
                        self.config.java_command,
                        "-jar",
                        str(Path(self.config.plantuml_jar).resolve()),
                        "-tpng",
                        "-charset", "UTF-8",
                        "-failfast2",
                        str(source_path),
                    ],
                    capture_output=True,
                    text=True,
                    timeout=self.config.render_timeout_seconds,
                )
            except subprocess.TimeoutExpired:
                logger.warning(f"⚠️ PlantUML timed out after {self.config.render_timeout_seconds}s")
                return None
            except OSError as e:
                logger.error(f"❌ PlantUML execution error: {e}")
                return None

            if result.returncode != 0 or not png_path.exists():
                logger.warning(f"⚠️ PlantUML failed with code {result.returncode}")
                if result.stderr:
                    logger.warning(f"❌ Error details: {result.stderr.strip()}")
                return None

            image = png_path.read_bytes()

        if len(image) <= self.config.min_png_bytes:
            logger.warning(f"⚠️ Generated PNG is too small or corrupted ({len(image)} bytes)")
            return None

        logger.info(f"✅ Successfully generated PNG ({len(image)} bytes)")
        return image


# Singleton instance for reuse
_renderer_instance = None

def get_plantuml_renderer() -> PlantUMLRenderer:
    """Get singleton PlantUMLRenderer instance"""
    global _renderer_instance
    if _renderer_instance is None:
        _renderer_instance = PlantUMLRenderer()
    return _renderer_instance

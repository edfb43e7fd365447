"""
Healing Pipeline Configuration

Centralized configuration for diagram healing and PlantUML rendering, read
from environment variables (and a local .env file when present).
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Number of repair levels the healing controller knows about
MAX_REPAIR_LEVELS = 3


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid integer for {name}={raw!r}, using {default}")
        return default


@dataclass
class HealingConfig:
    """Configuration for the diagram healing pipeline"""
    max_attempts: int = MAX_REPAIR_LEVELS
    parallel_workers: int = 0
    plantuml_jar: str = "./plantuml.jar"
    java_command: str = "java"
    render_timeout_seconds: int = 30
    min_png_bytes: int = 500
    log_level: str = "INFO"

    def __post_init__(self):
        # The attempt budget is never allowed past the number of repair levels
        if self.max_attempts < 0 or self.max_attempts > MAX_REPAIR_LEVELS:
            clamped = min(max(self.max_attempts, 0), MAX_REPAIR_LEVELS)
            logger.warning(f"⚠️ max_attempts={self.max_attempts} out of range, using {clamped}")
            self.max_attempts = clamped
        if self.parallel_workers < 0:
            self.parallel_workers = 0

    @classmethod
    def from_env(cls) -> 'HealingConfig':
        """Create configuration from environment variables"""
        load_dotenv()
        return cls(
            max_attempts=_int_from_env('UMLHEAL_MAX_ATTEMPTS', MAX_REPAIR_LEVELS),
            parallel_workers=_int_from_env('UMLHEAL_PARALLEL_WORKERS', 0),
            plantuml_jar=os.getenv('PLANTUML_JAR', './plantuml.jar'),
            java_command=os.getenv('PLANTUML_JAVA', 'java'),
            render_timeout_seconds=_int_from_env('PLANTUML_TIMEOUT', 30),
            min_png_bytes=_int_from_env('PLANTUML_MIN_PNG_BYTES', 500),
            log_level=os.getenv('UMLHEAL_LOG_LEVEL', 'INFO').upper(),
        )


# Global configuration instance
_config_instance: Optional[HealingConfig] = None

def get_healing_config() -> HealingConfig:
    """Get singleton healing configuration"""
    global _config_instance
    if _config_instance is None:
        _config_instance = HealingConfig.from_env()
        logger.info(
            f"✅ Healing config loaded: max_attempts={_config_instance.max_attempts}, "
            f"parallel_workers={_config_instance.parallel_workers}"
        )
    return _config_instance


def reset_healing_config() -> None:
    """Drop the cached configuration so the next access re-reads the environment"""
    global _config_instance
    _config_instance = None

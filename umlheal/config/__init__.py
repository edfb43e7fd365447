"""
Configuration package for umlheal
"""

from .healing_config import (
    HealingConfig,
    MAX_REPAIR_LEVELS,
    get_healing_config,
    reset_healing_config,
)

__all__ = ["HealingConfig", "MAX_REPAIR_LEVELS", "get_healing_config", "reset_healing_config"]

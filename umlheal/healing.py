#!/usr/bin/env python3
"""
Diagram Healing Controller
Bounded, deterministic repair of one candidate fragment toward validity.

Each candidate moves through Fresh -> Attempt1 -> Attempt2 -> Attempt3 and ends
Healed or Exhausted. The Fresh state validates the sanitized fragment; every
attempt applies a strictly larger repair toolkit to the original fragment and
validates again. The first valid result wins. An exhausted candidate receives
the fallback diagram for its ordinal, so healing always yields a diagram.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .config import HealingConfig, get_healing_config
from .fallback_templates import FallbackSynthesizer, get_fallback_synthesizer
from .fragment_extractor import RawFragment
from .plantuml_sanitizer import PlantUMLSanitizer, get_plantuml_sanitizer
from .plantuml_validator import (
    InvalidReason,
    PlantUMLValidator,
    ValidationResult,
    get_plantuml_validator,
)
from .schemas import Diagram
from .structural_repair import StructuralRepairer, get_structural_repairer

logger = logging.getLogger(__name__)


class HealingState(Enum):
    """States of the per-candidate healing state machine"""
    FRESH = "fresh"
    ATTEMPT_1 = "attempt_1"
    ATTEMPT_2 = "attempt_2"
    ATTEMPT_3 = "attempt_3"
    HEALED = "healed"
    EXHAUSTED = "exhausted"

    @classmethod
    def for_attempt(cls, attempt: int) -> 'HealingState':
        return {1: cls.ATTEMPT_1, 2: cls.ATTEMPT_2, 3: cls.ATTEMPT_3}[attempt]


@dataclass
class Candidate:
    """Mutable working copy of a fragment while it is being healed"""
    ordinal: int
    text: str
    attempt: int = 0

    @classmethod
    def from_fragment(cls, fragment: RawFragment) -> 'Candidate':
        return cls(ordinal=fragment.ordinal, text=fragment.wrapped())


@dataclass
class HealingResult:
    """Outcome of healing one candidate"""
    ordinal: int
    diagram: Diagram
    state: HealingState
    attempts_made: int = 0
    level: Optional[int] = None
    reasons: List[InvalidReason] = field(default_factory=list)
    trail: List[HealingState] = field(default_factory=list)
    fixes_applied: List[str] = field(default_factory=list)
    fallback_used: bool = False

    @property
    def success(self) -> bool:
        """Check if the diagram came from the fragment rather than the fallback catalog"""
        return self.state == HealingState.HEALED


class HealingLogger:
    """Specialized logger for healing events"""

    def __init__(self, name: str = "umlheal.healing"):
        self.logger = logging.getLogger(name)

    def log_attempt(self, candidate: Candidate, verdict: ValidationResult):
        self.logger.debug(
            f"🔄 HEALING: fragment {candidate.ordinal} attempt {candidate.attempt} failed "
            f"with {verdict.reason.value}: {verdict.detail}"
        )

    def log_success(self, result: HealingResult):
        if result.level == 0:
            self.logger.debug(f"✅ HEALING: fragment {result.ordinal} valid after sanitization")
        else:
            self.logger.info(
                f"✅ HEALING: fragment {result.ordinal} healed at level {result.level} "
                f"after {result.attempts_made} attempts"
            )

    def log_exhausted(self, result: HealingResult):
        reasons = ", ".join(reason.value for reason in result.reasons)
        self.logger.warning(
            f"❌ HEALING: fragment {result.ordinal} exhausted after {result.attempts_made} attempts "
            f"({reasons}); using fallback \"{result.diagram.title}\""
        )


class DiagramHealer:
    """Core orchestrator for candidate healing"""

    def __init__(
        self,
        config: Optional[HealingConfig] = None,
        sanitizer: Optional[PlantUMLSanitizer] = None,
        validator: Optional[PlantUMLValidator] = None,
        repairer: Optional[StructuralRepairer] = None,
        fallback: Optional[FallbackSynthesizer] = None,
    ):
        self.config = config or get_healing_config()
        self.sanitizer = sanitizer or get_plantuml_sanitizer()
        self.validator = validator or get_plantuml_validator()
        self.repairer = repairer or get_structural_repairer()
        self.fallback = fallback or get_fallback_synthesizer()
        self.logger = HealingLogger()

    def heal(self, fragment: RawFragment) -> HealingResult:
        """
        Run the healing state machine for one fragment.

        Args:
            fragment: Extracted fragment; its ordinal selects the fallback entry

        Returns:
            HealingResult whose diagram is always valid
        """
        candidate = Candidate.from_fragment(fragment)
        original = candidate.text
        trail = [HealingState.FRESH]
        reasons: List[InvalidReason] = []

        candidate.text, fixes_applied = self.sanitizer.sanitize_with_report(original)
        verdict = self.validator.validate(candidate.text)
        if verdict.is_valid:
            return self._healed(candidate, verdict, 0, trail, reasons, fixes_applied)
        reasons.append(verdict.reason)
        self.logger.log_attempt(candidate, verdict)

        for attempt in range(1, self.config.max_attempts + 1):
            candidate.attempt = attempt
            trail.append(HealingState.for_attempt(attempt))

            candidate.text, fixes_applied = self.apply_level(attempt, original)
            verdict = self.validator.validate(candidate.text)
            if verdict.is_valid:
                return self._healed(candidate, verdict, attempt, trail, reasons, fixes_applied)
            reasons.append(verdict.reason)
            self.logger.log_attempt(candidate, verdict)

        trail.append(HealingState.EXHAUSTED)
        reasons.append(InvalidReason.HEALING_EXHAUSTED)
        result = HealingResult(
            ordinal=candidate.ordinal,
            diagram=self.fallback.fallback(candidate.ordinal),
            state=HealingState.EXHAUSTED,
            attempts_made=candidate.attempt,
            reasons=reasons,
            trail=trail,
            fixes_applied=fixes_applied,
            fallback_used=True,
        )
        self.logger.log_exhausted(result)
        return result

    def apply_level(self, level: int, text: str) -> Tuple[str, List[str]]:
        """
        Apply the cumulative repair toolkit for a level.

        Level 1 sanitizes and fixes token-level errors, level 2 adds a
        structural rebuild, level 3 adds synthesized interactions.
        """
        fixed, fixes_applied = self.sanitizer.fix_tokens(text)
        if level >= 2:
            synthesize = level >= 3
            fixed = self.repairer.rebuild(fixed, synthesize_interactions=synthesize)
            fixes_applied.append("structural_reconstruction" if synthesize else "structural_rebuild")
        return fixed, fixes_applied

    def _healed(
        self,
        candidate: Candidate,
        verdict: ValidationResult,
        level: int,
        trail: List[HealingState],
        reasons: List[InvalidReason],
        fixes_applied: List[str],
    ) -> HealingResult:
        trail.append(HealingState.HEALED)
        result = HealingResult(
            ordinal=candidate.ordinal,
            diagram=verdict.diagram,
            state=HealingState.HEALED,
            attempts_made=candidate.attempt,
            level=level,
            reasons=reasons,
            trail=trail,
            fixes_applied=fixes_applied,
        )
        self.logger.log_success(result)
        return result

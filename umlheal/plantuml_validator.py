#!/usr/bin/env python3
"""
PlantUML Sequence Diagram Validation for umlheal

Decides whether a candidate fragment is a renderable sequence diagram. The
rules are checked in a fixed order and the first violated rule determines the
reported reason, so the same input always yields the same verdict:

1. at least 4 non-empty lines, markers included
2. first line is the start marker, last line is the end marker
3. exactly one title declaration
4. at least two distinct participant declarations
5. at least one interaction with a message, between declared participants
6. no disallowed construct (nested markers, tags, braces, class-style
   declarations, characters outside the approved set)
"""

import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .plantuml_utils import (
    CLASS_KEYWORDS,
    END_MARKER,
    INTERACTION_LINE_RE,
    PARTICIPANT_LINE_RE,
    START_MARKER,
    TITLE_LINE_RE,
)
from .schemas import Diagram, Interaction, InteractionKind, Participant

logger = logging.getLogger(__name__)


class InvalidReason(str, Enum):
    """Classification of validation failures"""
    MISSING_MARKERS = "MissingMarkers"
    MISSING_TITLE = "MissingTitle"
    INSUFFICIENT_PARTICIPANTS = "InsufficientParticipants"
    NO_INTERACTION = "NoInteraction"
    DISALLOWED_CONSTRUCT = "DisallowedConstruct"
    HEALING_EXHAUSTED = "HealingExhausted"


@dataclass(frozen=True)
class ValidationResult:
    """Either Valid (reason is None) or Invalid(reason) with a human-readable detail."""
    reason: Optional[InvalidReason] = None
    detail: str = ""
    diagram: Optional[Diagram] = field(default=None, compare=False)

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @classmethod
    def valid(cls, diagram: Diagram) -> 'ValidationResult':
        return cls(diagram=diagram)

    @classmethod
    def invalid(cls, reason: InvalidReason, detail: str) -> 'ValidationResult':
        return cls(reason=reason, detail=detail)


_HTML_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*>")
_CLASS_DECLARATION_RE = re.compile(
    r"^(?:" + "|".join(CLASS_KEYWORDS) + r")\s+[\"A-Za-z]", re.IGNORECASE
)
_ILLEGAL_CHAR_RE = re.compile(r"[^\w\s@\-><:\"']")


class PlantUMLValidator:
    """
    Applies the fixed structural grammar to a fragment. Pure and total: every
    input, however malformed, yields a ValidationResult.
    """

    min_lines = 4
    min_participants = 2

    def validate(self, text: str) -> ValidationResult:
        result = self._check(text)
        if not result.is_valid:
            logger.debug(f"🔍 PlantUML validation failed: {result.reason.value} ({result.detail})")
        return result

    def _check(self, text: str) -> ValidationResult:
        lines = [line.strip() for line in (text or "").splitlines() if line.strip()]

        if len(lines) < self.min_lines:
            return ValidationResult.invalid(
                InvalidReason.MISSING_MARKERS,
                f"expected at least {self.min_lines} non-empty lines including markers, found {len(lines)}",
            )
        if lines[0] != START_MARKER:
            return ValidationResult.invalid(InvalidReason.MISSING_MARKERS, f"first line is not {START_MARKER}")
        if lines[-1] != END_MARKER:
            return ValidationResult.invalid(InvalidReason.MISSING_MARKERS, f"last line is not {END_MARKER}")

        body = lines[1:-1]

        titles = self._titles(body)
        if len(titles) != 1:
            return ValidationResult.invalid(
                InvalidReason.MISSING_TITLE,
                "no title declaration" if not titles else f"found {len(titles)} title declarations",
            )

        participants = self._participants(body)
        if len(participants) < self.min_participants:
            return ValidationResult.invalid(
                InvalidReason.INSUFFICIENT_PARTICIPANTS,
                f"found {len(participants)} distinct participant declarations",
            )

        interactions = self._interactions(body)
        if not interactions:
            return ValidationResult.invalid(InvalidReason.NO_INTERACTION, "no interaction with a message")
        declared = set(participants)
        for interaction in interactions:
            for endpoint in (interaction.source, interaction.target):
                if endpoint not in declared:
                    return ValidationResult.invalid(
                        InvalidReason.INSUFFICIENT_PARTICIPANTS,
                        f"interaction references undeclared participant '{endpoint}'",
                    )

        problem = self._disallowed_construct(body)
        if problem:
            return ValidationResult.invalid(InvalidReason.DISALLOWED_CONSTRUCT, problem)

        return ValidationResult.valid(
            Diagram(
                title=titles[0],
                participants=[Participant(name=name) for name in participants],
                interactions=interactions,
            )
        )

    @staticmethod
    def _titles(body: List[str]) -> List[str]:
        titles = []
        for line in body:
            match = TITLE_LINE_RE.match(line)
            if match and match.group(1).strip():
                titles.append(match.group(1).strip())
        return titles

    @staticmethod
    def _participants(body: List[str]) -> List[str]:
        names: List[str] = []
        for line in body:
            match = PARTICIPANT_LINE_RE.match(line)
            if match and match.group(1) not in names:
                names.append(match.group(1))
        return names

    @staticmethod
    def _interactions(body: List[str]) -> List[Interaction]:
        interactions = []
        for line in body:
            match = INTERACTION_LINE_RE.match(line)
            if not match:
                continue
            source, arrow, target, message = match.groups()
            interactions.append(
                Interaction(
                    source=source,
                    target=target,
                    message=message.strip(),
                    kind=InteractionKind.from_arrow(arrow),
                )
            )
        return interactions

    @staticmethod
    def _disallowed_construct(body: List[str]) -> Optional[str]:
        for line in body:
            if START_MARKER in line or END_MARKER in line:
                return f"nested marker in line: {line}"
        for line in body:
            if _HTML_TAG_RE.search(line):
                return f"HTML-like tag in line: {line}"
        for line in body:
            if "{" in line or "}" in line:
                return f"brace character in line: {line}"
        for line in body:
            if _CLASS_DECLARATION_RE.match(line):
                return f"class-style declaration: {line}"
        for line in body:
            illegal = _ILLEGAL_CHAR_RE.search(line)
            if illegal:
                return f"illegal character {illegal.group(0)!r} in line: {line}"
        return None


# Singleton instance for reuse
_plantuml_validator = None

def get_plantuml_validator() -> PlantUMLValidator:
    """Get singleton PlantUMLValidator instance"""
    global _plantuml_validator
    if _plantuml_validator is None:
        _plantuml_validator = PlantUMLValidator()
    return _plantuml_validator


def validate_plantuml(text: str) -> ValidationResult:
    """Convenience function to validate one fragment"""
    return get_plantuml_validator().validate(text)

"""
Structural Repair for damaged sequence diagrams

Deterministic line-by-line reconstruction. Every line is classified with plain
string matching as a title, a participant declaration, an interaction or noise.
Recognized pieces are re-emitted in canonical form; noise is discarded.

Same input always produces the same output. No decision making beyond the
classification, no knowledge of what the model meant.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .plantuml_utils import (
    CLASS_KEYWORDS,
    END_MARKER,
    PARTICIPANT_KEYWORDS,
    START_MARKER,
    is_identifier,
    is_marker_line,
)
from .schemas import Interaction, InteractionKind

logger = logging.getLogger(__name__)

SYNTHESIZED_TITLE = "System Flow"
SYNTHESIZED_REQUEST = "request"
SYNTHESIZED_RESPONSE = "response"

_ARROW_CHARS = "-=.<>"
_DECLARATION_KEYWORDS = PARTICIPANT_KEYWORDS + CLASS_KEYWORDS


class LineKind(Enum):
    TITLE = "title"
    PARTICIPANT = "participant"
    INTERACTION = "interaction"
    UNRECOGNIZED = "unrecognized"


@dataclass
class SalvagedStructure:
    """Pieces recovered from a fragment, in first-seen order."""
    title: Optional[str] = None
    participants: List[str] = field(default_factory=list)
    interactions: List[Interaction] = field(default_factory=list)

    def add_participant(self, name: str):
        if name not in self.participants:
            self.participants.append(name)

    def add_interaction(self, interaction: Interaction):
        # Endpoints join the participant set even when never declared
        self.add_participant(interaction.source)
        self.add_participant(interaction.target)
        self.interactions.append(interaction)


def _clean_words(text: str) -> str:
    """Keep letters, digits, underscores and spaces; dashes and slashes become spaces."""
    chars = []
    for ch in text:
        if ch.isalnum() or ch in " _":
            chars.append(ch)
        elif ch in "-/\t":
            chars.append(" ")
    return " ".join("".join(chars).split())


def _identifier_from(token: str) -> Optional[str]:
    token = token.split("#")[0]
    name = "".join(ch for ch in token if ch.isalnum() or ch == "_")
    return name if is_identifier(name) else None


class StructuralRepairer:
    """
    Rebuilds a canonical diagram from whatever title, participant and
    interaction lines can be recognized in a fragment.
    """

    def classify(self, line: str) -> Tuple[LineKind, object]:
        """Return the kind of a line and its payload (title text, name or Interaction)."""
        line = line.strip()
        if not line or is_marker_line(line):
            return LineKind.UNRECOGNIZED, None

        title = self._match_title(line)
        if title:
            return LineKind.TITLE, title

        name = self._match_declaration(line)
        if name:
            return LineKind.PARTICIPANT, name

        interaction = self._match_interaction(line)
        if interaction:
            return LineKind.INTERACTION, interaction

        return LineKind.UNRECOGNIZED, None

    def salvage(self, text: str) -> SalvagedStructure:
        structure = SalvagedStructure()
        for line in (text or "").splitlines():
            kind, payload = self.classify(line)
            if kind is LineKind.TITLE and structure.title is None:
                structure.title = payload
            elif kind is LineKind.PARTICIPANT:
                structure.add_participant(payload)
            elif kind is LineKind.INTERACTION:
                structure.add_interaction(payload)
        return structure

    def rebuild(self, text: str, synthesize_interactions: bool = False) -> str:
        """
        Emit a canonical fragment from the salvaged structure.

        Args:
            text: Fragment to reconstruct
            synthesize_interactions: When no interaction was recognized but at
                least two participants were, add one request/response pair
                between the first two participants

        Returns:
            Marker-delimited fragment: title, participants, interactions
        """
        structure = self.salvage(text)

        if synthesize_interactions and not structure.interactions and len(structure.participants) >= 2:
            first, second = structure.participants[0], structure.participants[1]
            structure.add_interaction(
                Interaction(source=first, target=second, message=SYNTHESIZED_REQUEST)
            )
            structure.add_interaction(
                Interaction(
                    source=second,
                    target=first,
                    message=SYNTHESIZED_RESPONSE,
                    kind=InteractionKind.RESPONSE,
                )
            )
            logger.debug(f"Synthesized request/response pair between {first} and {second}")

        lines = [START_MARKER, f'title "{structure.title or SYNTHESIZED_TITLE}"']
        lines.extend(f"participant {name}" for name in structure.participants)
        lines.extend(interaction.to_plantuml() for interaction in structure.interactions)
        lines.append(END_MARKER)
        return "\n".join(lines)

    @staticmethod
    def _match_title(line: str) -> Optional[str]:
        lower = line.lower()
        if not lower.startswith("title"):
            return None
        if len(line) > 5 and line[5] not in " :\"'":
            return None
        return _clean_words(line[5:]) or None

    @staticmethod
    def _match_declaration(line: str) -> Optional[str]:
        if "->" in line or "<-" in line:
            return None
        tokens = line.split()
        if len(tokens) < 2 or tokens[0].lower() not in _DECLARATION_KEYWORDS:
            return None
        rest = tokens[1:]
        if tokens[0].lower() == "abstract" and rest[0].lower() == "class":
            rest = rest[1:]
        if not rest:
            return None

        lowered = [token.lower() for token in rest]
        if "as" in lowered:
            position = lowered.index("as")
            if position + 1 < len(rest):
                return _identifier_from(rest[position + 1])
            return None

        joined = " ".join(rest)
        if joined.startswith('"') and joined.count('"') >= 2:
            return _identifier_from(joined.split('"')[1].replace(" ", ""))
        return _identifier_from(rest[0])

    @staticmethod
    def _match_interaction(line: str) -> Optional[Interaction]:
        head, _, message = line.partition(":")

        start = next((i for i, ch in enumerate(head) if ch in _ARROW_CHARS), None)
        if start is None:
            return None
        left = head[:start].strip()
        if not is_identifier(left):
            return None

        end = start
        while end < len(head):
            ch = head[end]
            if ch == "[":
                closing = head.find("]", end)
                if closing == -1:
                    return None
                end = closing + 1
            elif ch in _ARROW_CHARS:
                end += 1
            else:
                break
        arrow = head[start:end]
        right_tokens = head[end:].split()
        if not right_tokens:
            return None
        right = _identifier_from(right_tokens[0].strip("\"'"))
        if not right:
            return None

        if ">" in arrow:
            source, target = left, right
        elif "<" in arrow:
            source, target = right, left
        else:
            return None

        body = arrow.replace("<", "").replace(">", "")
        if "[" in body:
            body = body[:body.find("[")] + body[body.find("]") + 1:]
        is_response = body.count("-") >= 2 or "=" in body or "." in body
        kind = InteractionKind.RESPONSE if is_response else InteractionKind.SYNCHRONOUS

        text = _clean_words(message)
        if not text:
            text = SYNTHESIZED_RESPONSE if is_response else SYNTHESIZED_REQUEST
        return Interaction(source=source, target=target, message=text, kind=kind)


# Singleton instance for reuse
_repairer_instance = None

def get_structural_repairer() -> StructuralRepairer:
    """Get singleton StructuralRepairer instance"""
    global _repairer_instance
    if _repairer_instance is None:
        _repairer_instance = StructuralRepairer()
    return _repairer_instance

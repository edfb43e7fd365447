"""
Sequence Diagram Schemas

Pydantic models for the terminal artifact of the healing pipeline. A Diagram
is only constructible when it is renderable: it carries a non-empty title,
at least two unique participants and at least one interaction whose
endpoints are all declared participants.

Design Principles:
- Validation-first: the acceptance predicate lives on the model itself
- Round-trippable: every Diagram serializes to the canonical PlantUML subset
- Order-preserving: participants and interactions keep first-seen order
"""

from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from enum import Enum

from ..plantuml_utils import (
    END_MARKER,
    IDENTIFIER_PATTERN,
    RESPONSE_ARROW,
    START_MARKER,
    SYNC_ARROW,
)


class InteractionKind(str, Enum):
    """Kind of message exchanged between two participants."""
    SYNCHRONOUS = "synchronous"
    RESPONSE = "response"

    @property
    def arrow(self) -> str:
        return SYNC_ARROW if self is InteractionKind.SYNCHRONOUS else RESPONSE_ARROW

    @classmethod
    def from_arrow(cls, arrow: str) -> "InteractionKind":
        return cls.RESPONSE if arrow == RESPONSE_ARROW else cls.SYNCHRONOUS


class Participant(BaseModel):
    """A named lifeline declared with `participant <name>`."""
    name: str = Field(
        ...,
        description="Identifier used by interactions to reference this participant",
        pattern=rf"^{IDENTIFIER_PATTERN}$"
    )

    def to_plantuml(self) -> str:
        return f"participant {self.name}"


class Interaction(BaseModel):
    """
    A directed message between two participants.

    Synchronous interactions render with a single-line arrow, responses with
    a double-line arrow.
    """
    source: str = Field(..., pattern=rf"^{IDENTIFIER_PATTERN}$")
    target: str = Field(..., pattern=rf"^{IDENTIFIER_PATTERN}$")
    message: str = Field(..., min_length=1, description="Label attached to the arrow")
    kind: InteractionKind = InteractionKind.SYNCHRONOUS

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message must not be blank")
        return v

    def to_plantuml(self) -> str:
        return f"{self.source} {self.kind.arrow} {self.target} : {self.message}"


class Diagram(BaseModel):
    """
    A validated sequence diagram: title + ordered participants + ordered
    interactions.
    """
    title: str = Field(..., min_length=1)
    participants: List[Participant] = Field(..., min_length=2)
    interactions: List[Interaction] = Field(..., min_length=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @model_validator(mode="after")
    def validate_structure(self) -> "Diagram":
        names = [p.name for p in self.participants]
        if len(set(names)) != len(names):
            raise ValueError("participant names must be unique")
        if len(set(names)) < 2:
            raise ValueError("a diagram needs at least two distinct participants")
        declared = set(names)
        for interaction in self.interactions:
            for endpoint in (interaction.source, interaction.target):
                if endpoint not in declared:
                    raise ValueError(f"interaction references undeclared participant '{endpoint}'")
        return self

    @property
    def participant_names(self) -> List[str]:
        return [p.name for p in self.participants]

    def to_plantuml(self) -> str:
        """Serialize back to the canonical marker-delimited text form."""
        lines = [START_MARKER, f'title "{self.title}"']
        lines.extend(p.to_plantuml() for p in self.participants)
        lines.extend(i.to_plantuml() for i in self.interactions)
        lines.append(END_MARKER)
        return "\n".join(lines)


# === HTTP Request / Response Models ===

class DiagramTextRequest(BaseModel):
    """Generated text that may contain any number of diagram fragments."""
    text: str = Field(..., description="Raw model output to scan for diagrams")


class RenderRequest(BaseModel):
    plantuml: str = Field(..., min_length=1, description="PlantUML source to render")


class HealedDiagramResponse(BaseModel):
    """One entry of the ordered heal output."""
    ordinal: int = Field(..., ge=0)
    title: str
    plantuml: str
    state: str = Field(..., description="Terminal healing state: healed or exhausted")
    attempts: int = Field(..., ge=0)
    level: Optional[int] = Field(
        None,
        description="Repair level that produced a valid diagram (0 = sanitize only)"
    )
    fallback_used: bool = False
    reasons: List[str] = Field(default_factory=list)


class HealResponse(BaseModel):
    diagrams: List[HealedDiagramResponse]
    fragment_count: int = Field(..., ge=0)


class ValidationResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    detail: str = ""

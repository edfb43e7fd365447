"""
Diagram Schemas

Pydantic models for validated sequence diagrams and the HTTP payloads that
carry them.

Usage:
    from umlheal.schemas import Diagram, Participant, Interaction

    diagram = Diagram(
        title="Login",
        participants=[Participant(name="User"), Participant(name="Api")],
        interactions=[Interaction(source="User", target="Api", message="login")],
    )
    print(diagram.to_plantuml())
"""

from .diagram_schemas import (
    # Diagram model
    InteractionKind,
    Participant,
    Interaction,
    Diagram,

    # HTTP payloads
    DiagramTextRequest,
    RenderRequest,
    HealedDiagramResponse,
    HealResponse,
    ValidationResponse,
)

__all__ = [
    "InteractionKind",
    "Participant",
    "Interaction",
    "Diagram",
    "DiagramTextRequest",
    "RenderRequest",
    "HealedDiagramResponse",
    "HealResponse",
    "ValidationResponse",
]

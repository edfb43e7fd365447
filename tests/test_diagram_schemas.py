"""
Tests for the Diagram model and its invariants.
"""

import pytest
from pydantic import ValidationError

from umlheal.schemas import Diagram, Interaction, InteractionKind, Participant


def _participants(*names):
    return [Participant(name=name) for name in names]


class TestDiagram:
    """Test suite for Diagram construction."""

    def test_valid_diagram(self):
        diagram = Diagram(
            title=" Login ",
            participants=_participants("User", "Api"),
            interactions=[Interaction(source="User", target="Api", message="login")],
        )

        assert diagram.title == "Login"
        assert diagram.participant_names == ["User", "Api"]

    def test_serialization(self):
        diagram = Diagram(
            title="Login",
            participants=_participants("User", "Api"),
            interactions=[
                Interaction(source="User", target="Api", message="login"),
                Interaction(source="Api", target="User", message="token", kind=InteractionKind.RESPONSE),
            ],
        )

        assert diagram.to_plantuml() == (
            "@startuml\n"
            'title "Login"\n'
            "participant User\n"
            "participant Api\n"
            "User -> Api : login\n"
            "Api --> User : token\n"
            "@enduml"
        )

    @pytest.mark.parametrize("kwargs", [
        {"title": "   "},
        {"participants": _participants("User")},
        {"participants": _participants("User", "User")},
        {"interactions": []},
        {"interactions": [Interaction(source="User", target="Ghost", message="boo")]},
    ])
    def test_invalid_diagrams_are_rejected(self, kwargs):
        fields = {
            "title": "Login",
            "participants": _participants("User", "Api"),
            "interactions": [Interaction(source="User", target="Api", message="login")],
        }
        fields.update(kwargs)

        with pytest.raises(ValidationError):
            Diagram(**fields)


class TestParts:
    """Participant and Interaction models."""

    @pytest.mark.parametrize("name", ["", "1st", "Web App", "na-me"])
    def test_invalid_participant_names(self, name):
        with pytest.raises(ValidationError):
            Participant(name=name)

    def test_blank_message_rejected(self):
        with pytest.raises(ValidationError):
            Interaction(source="A", target="B", message="   ")

    def test_arrow_kinds(self):
        assert InteractionKind.SYNCHRONOUS.arrow == "->"
        assert InteractionKind.RESPONSE.arrow == "-->"
        assert InteractionKind.from_arrow("-->") is InteractionKind.RESPONSE
        assert InteractionKind.from_arrow("->") is InteractionKind.SYNCHRONOUS

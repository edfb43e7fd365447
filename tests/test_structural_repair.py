"""
Tests for the structural repairer: line classification, salvage and
canonical reconstruction.
"""

import pytest

from umlheal.plantuml_validator import validate_plantuml
from umlheal.schemas import Interaction, InteractionKind
from umlheal.structural_repair import (
    SYNTHESIZED_TITLE,
    LineKind,
    StructuralRepairer,
    get_structural_repairer,
)


@pytest.fixture
def repairer():
    return StructuralRepairer()


class TestClassify:
    """Line classification without regular expressions."""

    @pytest.mark.parametrize("line, expected", [
        ('title: "Order Flow"', "Order Flow"),
        ("TITLE Order/Flow", "Order Flow"),
        ('title "Login (v2)"', "Login v2"),
    ])
    def test_titles(self, repairer, line, expected):
        assert repairer.classify(line) == (LineKind.TITLE, expected)

    @pytest.mark.parametrize("line, expected", [
        ("participant Api", "Api"),
        ("actor User as U", "U"),
        ('participant "Web App"', "WebApp"),
        ("database Store #lightblue", "Store"),
        ("abstract class Shape", "Shape"),
        ("queue Jobs", "Jobs"),
    ])
    def test_declarations(self, repairer, line, expected):
        assert repairer.classify(line) == (LineKind.PARTICIPANT, expected)

    def test_synchronous_interaction(self, repairer):
        kind, interaction = repairer.classify("A -> B : go")

        assert kind is LineKind.INTERACTION
        assert interaction == Interaction(source="A", target="B", message="go")

    def test_reversed_response_interaction(self, repairer):
        _, interaction = repairer.classify("B <-- A : done")

        assert (interaction.source, interaction.target) == ("A", "B")
        assert interaction.kind is InteractionKind.RESPONSE

    def test_colored_arrow(self, repairer):
        _, interaction = repairer.classify("A -[#red]> B : alert")

        assert interaction.kind is InteractionKind.SYNCHRONOUS
        assert interaction.message == "alert"

    def test_dotted_arrow_is_response(self, repairer):
        _, interaction = repairer.classify("A ..> B : async")
        assert interaction.kind is InteractionKind.RESPONSE

    def test_missing_message_is_synthesized(self, repairer):
        _, request = repairer.classify("A -> B")
        _, response = repairer.classify("B --> A :")

        assert request.message == "request"
        assert response.message == "response"

    def test_declaration_like_message_is_an_interaction(self, repairer):
        kind, interaction = repairer.classify("Database -> Api : rows as json")

        assert kind is LineKind.INTERACTION
        assert interaction.message == "rows as json"

    @pytest.mark.parametrize("line", [
        "",
        "@startuml",
        "@enduml",
        "titled thing",
        "just some prose.",
        "A -- B : undirected",
        "skinparam monochrome true",
        "}",
    ])
    def test_unrecognized(self, repairer, line):
        assert repairer.classify(line) == (LineKind.UNRECOGNIZED, None)


class TestSalvage:
    """Recovery of structure in first-seen order."""

    def test_first_title_wins_and_endpoints_join(self, repairer):
        text = 'title "First"\ntitle "Second"\nparticipant A\nB -> A : ping\nA -> C : pong'
        structure = repairer.salvage(text)

        assert structure.title == "First"
        assert structure.participants == ["A", "B", "C"]
        assert [i.message for i in structure.interactions] == ["ping", "pong"]

    def test_empty_text(self, repairer):
        structure = repairer.salvage("")

        assert structure.title is None
        assert structure.participants == []
        assert structure.interactions == []


class TestRebuild:
    """Canonical reconstruction."""

    def test_rebuild_discards_noise(self, repairer):
        text = (
            "skinparam x\n"
            "title Broken {diagram}\n"
            "actor User\n"
            "User -> Api : fetch {items}\n"
            "noise line\n"
            "}"
        )
        rebuilt = repairer.rebuild(text)

        assert rebuilt == (
            "@startuml\n"
            'title "Broken diagram"\n'
            "participant User\n"
            "participant Api\n"
            "User -> Api : fetch items\n"
            "@enduml"
        )
        assert validate_plantuml(rebuilt).is_valid

    def test_rebuild_replaces_unusable_message(self, repairer):
        text = "@startuml\ntitle \"Cart\"\nparticipant Cart\nparticipant Payment\nCart -> Payment : {}\n@enduml"
        rebuilt = repairer.rebuild(text)

        assert "Cart -> Payment : request" in rebuilt.splitlines()
        assert validate_plantuml(rebuilt).is_valid

    def test_missing_title_is_synthesized(self, repairer):
        rebuilt = repairer.rebuild("A -> B : go")
        assert f'title "{SYNTHESIZED_TITLE}"' in rebuilt.splitlines()

    def test_synthesized_interactions(self, repairer):
        text = "participant A\nparticipant B"

        plain = repairer.rebuild(text)
        synthesized = repairer.rebuild(text, synthesize_interactions=True)

        assert not validate_plantuml(plain).is_valid
        assert synthesized.splitlines()[-3:] == ["A -> B : request", "B --> A : response", "@enduml"]
        assert validate_plantuml(synthesized).is_valid

    def test_no_synthesis_when_interactions_exist(self, repairer):
        text = "participant A\nparticipant B\nB -> A : hello"
        rebuilt = repairer.rebuild(text, synthesize_interactions=True)

        assert "request" not in rebuilt
        assert "B -> A : hello" in rebuilt.splitlines()

    def test_no_synthesis_with_single_participant(self, repairer):
        rebuilt = repairer.rebuild("participant A", synthesize_interactions=True)
        assert "->" not in rebuilt

    def test_rebuild_is_deterministic(self, repairer):
        text = "actor U\nU -> S : <tag> a\nS --> U"
        assert repairer.rebuild(text) == repairer.rebuild(text)

    def test_singleton(self):
        assert get_structural_repairer() is get_structural_repairer()

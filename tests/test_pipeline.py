"""
Tests for the end-to-end healing pipeline.
"""

from unittest.mock import Mock

import pytest

from umlheal.config import HealingConfig
from umlheal.fallback_templates import FALLBACK_CATALOG
from umlheal.healing import DiagramHealer
from umlheal.pipeline import DiagramPipeline, heal_diagrams
from umlheal.plantuml_validator import validate_plantuml


GENERATED = """The login flow works like this:

@startuml
title "Login"
participant User
participant Api
User -> Api : login
Api --> User : token
@enduml

And here is the other part:

@startuml
this is not a diagram at all
@enduml

@startuml
title **Payment Flow**
participant Client
participant Gateway
Client  ==>  Gateway : charge card
@enduml
"""


@pytest.fixture
def pipeline():
    return DiagramPipeline(config=HealingConfig())


class TestDiagramPipeline:
    """Test suite for DiagramPipeline."""

    def test_one_diagram_per_fragment_in_order(self, pipeline):
        results = pipeline.process(GENERATED)

        assert [r.ordinal for r in results] == [0, 1, 2]
        assert [r.diagram.title for r in results] == ["Login", "Authentication Flow", "Payment Flow"]
        assert [r.fallback_used for r in results] == [False, True, False]

    def test_every_output_is_valid(self, pipeline):
        for diagram in pipeline.diagrams(GENERATED):
            assert validate_plantuml(diagram.to_plantuml()).is_valid

    def test_text_without_fragments(self, pipeline):
        assert pipeline.process("no diagrams here") == []
        assert pipeline.process("") == []

    def test_blank_fragments_are_dropped(self, pipeline):
        text = "@startuml\n\n   \n@enduml\n@startuml\nnot a diagram\n@enduml"
        results = pipeline.process(text)

        assert len(results) == 1
        assert results[0].ordinal == 1
        assert results[0].diagram == FALLBACK_CATALOG[1]

    def test_pipeline_is_deterministic(self, pipeline):
        first = pipeline.diagrams(GENERATED)
        second = pipeline.diagrams(GENERATED)
        assert first == second

    def test_parallel_healing_preserves_order(self):
        sequential = DiagramPipeline(config=HealingConfig()).diagrams(GENERATED)
        parallel = DiagramPipeline(config=HealingConfig(parallel_workers=3)).diagrams(GENERATED)

        assert parallel == sequential

    def test_healer_called_once_per_fragment(self):
        config = HealingConfig()
        healer = Mock(wraps=DiagramHealer(config=config))
        DiagramPipeline(config=config, healer=healer).process(GENERATED)

        assert healer.heal.call_count == 3

    def test_negative_workers_mean_sequential(self):
        assert HealingConfig(parallel_workers=-2).parallel_workers == 0


class TestHealDiagrams:
    """Test the convenience function."""

    def test_heal_diagrams_returns_diagrams(self):
        diagrams = heal_diagrams(GENERATED, config=HealingConfig())

        assert len(diagrams) == 3
        assert diagrams[1] == FALLBACK_CATALOG[1]

    def test_two_fragments_with_one_unrepairable(self):
        text = (
            "@startuml\ntitle \"A\"\nparticipant X\nparticipant Y\nX -> Y : hi\n@enduml\n"
            "@startuml\nthis is not a diagram at all\n@enduml"
        )
        diagrams = heal_diagrams(text, config=HealingConfig())

        assert len(diagrams) == 2
        assert diagrams[0].title == "A"
        assert diagrams[1].title == "Authentication Flow"

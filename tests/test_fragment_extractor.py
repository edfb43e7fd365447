"""
Unit Tests for fragment extraction

Covers marker matching, malformed delimiting and fragment removal.
"""

import dataclasses

import pytest

from umlheal.fragment_extractor import (
    FragmentExtractor,
    RawFragment,
    extract_fragments,
    strip_fragments,
)


GENERATED_TEXT = """Here is the workflow.

@startuml
title "Login"
participant User
participant Api
User -> Api : login
@enduml

And a second one:
```plantuml
@startuml
title "Logout"
@enduml
```
"""


class TestFragmentExtractor:
    """Test suite for FragmentExtractor."""

    def test_extracts_fragments_in_order(self):
        fragments = extract_fragments(GENERATED_TEXT)

        assert [f.ordinal for f in fragments] == [0, 1]
        assert fragments[0].text.splitlines()[0] == 'title "Login"'
        assert fragments[1].text == 'title "Logout"'

    def test_fragment_text_excludes_markers_and_is_untouched(self):
        text = "@startuml\n  indented   line  \n@enduml"
        fragment = extract_fragments(text)[0]

        assert fragment.text == "  indented   line  "

    def test_no_markers_yields_nothing(self):
        assert extract_fragments("plain prose without diagrams") == []
        assert extract_fragments("") == []

    def test_extractor_is_restartable(self):
        extractor = FragmentExtractor(GENERATED_TEXT)

        first = list(extractor)
        second = list(extractor)

        assert first == second
        assert len(first) == 2

    def test_markers_with_surrounding_whitespace_match(self):
        fragments = extract_fragments("   @startuml  \nA\n\t@enduml\n")
        assert [f.text for f in fragments] == ["A"]

    def test_stray_end_marker_is_skipped(self):
        text = "@enduml\n@startuml\nA\n@enduml"
        fragments = extract_fragments(text)

        assert len(fragments) == 1
        assert fragments[0].text == "A"
        assert fragments[0].ordinal == 0

    def test_nested_start_discards_unmatched_region(self):
        text = "@startuml\nlost\n@startuml\nkept\n@enduml"
        fragments = extract_fragments(text)

        assert [f.text for f in fragments] == ["kept"]

    def test_unterminated_region_is_skipped(self):
        text = "@startuml\nA\n@enduml\n@startuml\nnever closed"
        fragments = extract_fragments(text)

        assert [f.text for f in fragments] == ["A"]

    def test_inline_markers_are_not_delimiters(self):
        text = "see @startuml inline @enduml here"
        assert extract_fragments(text) == []


class TestRawFragment:
    """Test RawFragment helpers."""

    def test_is_frozen(self):
        fragment = RawFragment(ordinal=0, text="A")
        with pytest.raises(dataclasses.FrozenInstanceError):
            fragment.text = "B"

    def test_blank_detection(self):
        assert RawFragment(ordinal=0, text="  \n\t").is_blank
        assert not RawFragment(ordinal=0, text="A").is_blank

    def test_wrapped_adds_markers(self):
        fragment = RawFragment(ordinal=0, text="title \"X\"")
        assert fragment.wrapped() == '@startuml\ntitle "X"\n@enduml'


class TestStripFragments:
    """Test removal of diagram source from prose."""

    def test_removes_every_fragment(self):
        text = "Intro\n@startuml\nA -> B : x\n@enduml\nMiddle\n@startuml\nC\n@enduml\nOutro"
        assert strip_fragments(text) == "Intro\nMiddle\nOutro"

    def test_text_without_fragments_is_trimmed(self):
        assert strip_fragments("  just prose \n") == "just prose"

    def test_unmatched_regions_are_kept(self):
        text = "Intro\n@startuml\nnever closed"
        assert strip_fragments(text) == text


class TestMarkerVariants:
    """Marker lines as models commonly write them."""

    BODY = 'title "Login"\nparticipant User\nparticipant Api\nUser -> Api : login'

    def test_named_diagram_start(self):
        fragments = extract_fragments(f"@startuml LoginFlow\n{self.BODY}\n@enduml")
        assert [f.text for f in fragments] == [self.BODY]

    def test_end_marker_with_closing_fence(self):
        fragments = extract_fragments(f"```plantuml\n@startuml\n{self.BODY}\n@enduml```")
        assert [f.text for f in fragments] == [self.BODY]

    def test_end_marker_with_spaced_fence(self):
        fragments = extract_fragments(f"@startuml\n{self.BODY}\n  @enduml ```  ")
        assert len(fragments) == 1

    @pytest.mark.parametrize("line", ["@startumlX", "@startuml_flow", "x @startuml"])
    def test_lookalike_start_lines_are_ignored(self, line):
        assert extract_fragments(f"{line}\n{self.BODY}\n@enduml") == []

    @pytest.mark.parametrize("line", ["@enduml now", "@endumlx", "``` @enduml"])
    def test_lookalike_end_lines_are_ignored(self, line):
        assert extract_fragments(f"@startuml\n{self.BODY}\n{line}") == []

    def test_named_fragment_is_healed(self):
        from umlheal.config import HealingConfig
        from umlheal.pipeline import heal_diagrams

        for text in (
            f"```plantuml\n@startuml\n{self.BODY}\n@enduml```",
            f"@startuml LoginFlow\n{self.BODY}\n@enduml",
        ):
            diagrams = heal_diagrams(text, config=HealingConfig())
            assert [d.title for d in diagrams] == ["Login"]

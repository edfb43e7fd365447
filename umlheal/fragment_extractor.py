"""
Fragment Extraction for generated text

Locates marker-delimited diagram fragments in free-form model output. Malformed
delimiting (stray end markers, nested start markers, an unterminated final
region) is skipped silently; problems are reported downstream at the diagram
level only.
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .plantuml_utils import is_end_line, is_start_line, wrap_in_markers


@dataclass(frozen=True)
class RawFragment:
    """Text found strictly between a start marker line and the next end marker line."""
    ordinal: int
    text: str

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def wrapped(self) -> str:
        """The fragment body placed back between canonical markers."""
        return wrap_in_markers(self.text)


def _fragment_spans(lines: List[str]) -> Iterator[Tuple[int, int]]:
    """Yield (start_index, end_index) of each well-formed marker pair."""
    start = None
    for index, line in enumerate(lines):
        if is_start_line(line):
            # A start inside an open region leaves the earlier region unmatched;
            # scanning resumes with this marker as the new opening.
            start = index
        elif is_end_line(line):
            if start is None:
                continue
            yield start, index
            start = None


class FragmentExtractor:
    """
    Restartable view over the fragments of one piece of generated text.

    Iterating scans the text lazily; iterating again rescans from the start
    and yields the same fragments in the same order.
    """

    def __init__(self, text: str):
        self.text = text or ""

    def __iter__(self) -> Iterator[RawFragment]:
        lines = self.text.splitlines()
        for ordinal, (start, end) in enumerate(_fragment_spans(lines)):
            yield RawFragment(ordinal=ordinal, text="\n".join(lines[start + 1:end]))


def extract_fragments(text: str) -> List[RawFragment]:
    """Convenience function returning every fragment of text as a list"""
    return list(FragmentExtractor(text))


def strip_fragments(text: str) -> str:
    """Return text with every delimited fragment (markers included) removed."""
    lines = (text or "").splitlines()
    spans = list(_fragment_spans(lines))
    if not spans:
        return (text or "").strip()

    kept = []
    cursor = 0
    for start, end in spans:
        kept.extend(lines[cursor:start])
        cursor = end + 1
    kept.extend(lines[cursor:])
    return "\n".join(kept).strip()

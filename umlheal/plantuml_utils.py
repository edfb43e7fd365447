"""
PlantUML Syntax Utilities for umlheal

Shared constants and small helpers for the sequence-diagram subset that the
healing pipeline understands: delimiter markers, canonical arrows and the
identifier grammar.
"""

import re

START_MARKER = "@startuml"
END_MARKER = "@enduml"

SYNC_ARROW = "->"
RESPONSE_ARROW = "-->"

IDENTIFIER_PATTERN = r"[A-Za-z][A-Za-z0-9_]*"
IDENTIFIER_RE = re.compile(rf"^{IDENTIFIER_PATTERN}$")

# Canonical line forms
TITLE_LINE_RE = re.compile(r'^title "([^"]+)"$')
PARTICIPANT_LINE_RE = re.compile(rf"^participant ({IDENTIFIER_PATTERN})$")
INTERACTION_LINE_RE = re.compile(
    rf"^({IDENTIFIER_PATTERN})\s*(-->|->)\s*({IDENTIFIER_PATTERN})\s*:\s*(\S.*)$"
)

# Keywords PlantUML accepts for a sequence participant
PARTICIPANT_KEYWORDS = (
    "participant",
    "actor",
    "boundary",
    "control",
    "entity",
    "database",
    "collections",
    "queue",
)

# Structural keywords that are illegal inside a sequence diagram
CLASS_KEYWORDS = ("class", "interface", "abstract", "enum", "component")


def is_identifier(token: str) -> bool:
    """True when token matches the identifier grammar."""
    if not token or not token[0].isascii() or not token[0].isalpha():
        return False
    return all(ch.isascii() and (ch.isalnum() or ch == "_") for ch in token)


def is_start_line(line: str) -> bool:
    """A start marker line, optionally followed by a diagram name."""
    stripped = line.strip()
    if not stripped.startswith(START_MARKER):
        return False
    rest = stripped[len(START_MARKER):]
    return not rest or rest[0].isspace()


def is_end_line(line: str) -> bool:
    """An end marker line, possibly closed by a trailing code fence."""
    return line.strip().rstrip("`").rstrip() == END_MARKER


def is_marker_line(line: str) -> bool:
    stripped = line.strip()
    return stripped == START_MARKER or stripped == END_MARKER


def wrap_in_markers(body: str) -> str:
    """Place body between the canonical start and end marker lines."""
    body = body.strip("\n")
    if not body:
        return f"{START_MARKER}\n{END_MARKER}"
    return f"{START_MARKER}\n{body}\n{END_MARKER}"

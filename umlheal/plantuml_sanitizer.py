#!/usr/bin/env python3
"""
PlantUML Fragment Sanitization for umlheal

Cleans a candidate sequence diagram produced by a language model. Cleaning is
expressed as an ordered list of small, named, total rewrite rules. Later rules
assume the earlier ones have run, so the order of SANITIZE_RULES is part of the
contract. Sanitizing an already sanitized fragment returns it unchanged.

TOKEN_FIX_RULES hold the more invasive token-level corrections used by the
first healing level; they are never applied by plain sanitization.
"""

import re
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .plantuml_utils import (
    CLASS_KEYWORDS,
    END_MARKER,
    IDENTIFIER_PATTERN,
    PARTICIPANT_KEYWORDS,
    RESPONSE_ARROW,
    START_MARKER,
    SYNC_ARROW,
    is_identifier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteRule:
    """A named text transformation that never fails."""
    name: str
    description: str
    apply: Callable[[str], str]


def _map_lines(text: str, fn: Callable[[str], Optional[str]]) -> str:
    """Apply fn to every line; a None result drops the line."""
    kept = []
    for line in text.splitlines():
        result = fn(line)
        if result is not None:
            kept.append(result)
    return "\n".join(kept)


def _arrow_for_run(run: str) -> str:
    # A lone dash is the single-line arrow; any longer or '=' run is a response
    return SYNC_ARROW if run == "-" else RESPONSE_ARROW


# === Sanitization rules (fixed order) ===

_CODE_FENCE_RE = re.compile(r"^\s*```")
_INLINE_MARKUP_PATTERNS = [
    re.compile(r"\*\*(.+?)\*\*"),
    re.compile(r"__(.+?)__"),
    re.compile(r"~~(.+?)~~"),
    re.compile(r"`([^`]*)`"),
    re.compile(r"(?<![*\w])\*(?=\S)(.+?)(?<=\S)\*(?![*\w])"),
]


def strip_inline_markup(text: str) -> str:
    text = _map_lines(text, lambda line: None if _CODE_FENCE_RE.match(line) else line)
    previous = None
    while previous != text:
        previous = text
        for pattern in _INLINE_MARKUP_PATTERNS:
            text = pattern.sub(r"\1", text)
    return text


_EMPTY_ANNOTATION_RE = re.compile(
    r"^\s*(?:[rh]?note|legend|caption|header|footer)"
    r"(?:\s+(?:left|right|over|top|bottom|center)(?:\s+of)?"
    rf"(?:\s+{IDENTIFIER_PATTERN}(?:\s*,\s*{IDENTIFIER_PATTERN})?)?)?"
    r"\s*:?\s*$",
    re.IGNORECASE,
)


def remove_empty_annotations(text: str) -> str:
    return _map_lines(text, lambda line: None if _EMPTY_ANNOTATION_RE.match(line) else line)


_TITLE_RE = re.compile(r"^\s*title\b\s*:?\s*(.*)$", re.IGNORECASE)


def clean_title_text(raw: str) -> str:
    """Strip quoting and punctuation from title text, collapsing whitespace."""
    raw = raw.strip().strip("\"'")
    raw = re.sub(r"[-/]", " ", raw)
    raw = re.sub(r"[^\w\s]", "", raw)
    return " ".join(raw.split())


def normalize_title(text: str) -> str:
    def fix(line: str) -> Optional[str]:
        match = _TITLE_RE.match(line)
        if not match:
            return line
        title = clean_title_text(match.group(1))
        return f'title "{title}"' if title else None

    return _map_lines(text, fix)


_LOOSE_ARROW_RE = re.compile(
    rf"^\s*({IDENTIFIER_PATTERN})\s*([-=]+)>\s*({IDENTIFIER_PATTERN})\s*(?::\s*(.*))?$"
)


def normalize_arrows(text: str) -> str:
    def fix(line: str) -> str:
        match = _LOOSE_ARROW_RE.match(line)
        if not match:
            return line
        source, run, target, message = match.groups()
        normalized = f"{source} {_arrow_for_run(run)} {target}"
        if message is not None:
            normalized = f"{normalized} : {message.strip()}".rstrip()
        return normalized

    return _map_lines(text, fix)


def drop_symbol_lines(text: str) -> str:
    def fix(line: str) -> Optional[str]:
        if line.strip() and not any(ch.isalnum() for ch in line):
            return None
        return line

    return _map_lines(text, fix)


def normalize_whitespace(text: str) -> str:
    def fix(line: str) -> Optional[str]:
        collapsed = " ".join(line.split())
        return collapsed or None

    return _map_lines(text, fix)


def ensure_markers(text: str) -> str:
    lines = text.splitlines()
    if not lines or lines[0] != START_MARKER:
        lines.insert(0, START_MARKER)
    if lines[-1] != END_MARKER:
        lines.append(END_MARKER)
    return "\n".join(lines)


SANITIZE_RULES: Tuple[RewriteRule, ...] = (
    RewriteRule("strip_inline_markup", "Remove emphasis and code-span markup, keep inner text", strip_inline_markup),
    RewriteRule("remove_empty_annotations", "Drop note/legend keywords with no attached content", remove_empty_annotations),
    RewriteRule("normalize_title", 'Rewrite titles to title "<text>" without punctuation', normalize_title),
    RewriteRule("normalize_arrows", "Collapse dash/equals arrows to -> or -->", normalize_arrows),
    RewriteRule("drop_symbol_lines", "Drop lines made only of punctuation or symbols", drop_symbol_lines),
    RewriteRule("normalize_whitespace", "Collapse whitespace, trim lines, drop blank lines", normalize_whitespace),
    RewriteRule("ensure_markers", "Wrap the fragment in start/end markers when missing", ensure_markers),
)


# === Token-level fixes (healing level 1) ===

_STYLE_DIRECTIVES = ("skinparam", "!", "hide ", "show ", "scale ", "<style", "</style")


def drop_style_directives(text: str) -> str:
    def fix(line: str) -> Optional[str]:
        return None if line.strip().lower().startswith(_STYLE_DIRECTIVES) else line

    return _map_lines(text, fix)


def remove_stray_markers(text: str) -> str:
    lines = text.splitlines()
    last = len(lines) - 1
    cleaned = []
    for index, line in enumerate(lines):
        if (index == 0 and line == START_MARKER) or (index == last and line == END_MARKER):
            cleaned.append(line)
        else:
            cleaned.append(line.replace(START_MARKER, "").replace(END_MARKER, ""))
    return "\n".join(cleaned)


_STEREOTYPE_RE = re.compile(r"<<[^<>]*>>")
_HTML_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*>")


def strip_html_tags(text: str) -> str:
    text = _STEREOTYPE_RE.sub("", text)
    return _HTML_TAG_RE.sub("", text)


def strip_braces(text: str) -> str:
    return text.replace("{", "").replace("}", "")


_DECLARATION_RE = re.compile(
    r"^\s*(?P<keyword>" + "|".join(PARTICIPANT_KEYWORDS + CLASS_KEYWORDS) + r")(?:\s+class)?\s+(?P<rest>.+)$",
    re.IGNORECASE,
)
_ALIAS_RE = re.compile(r"\sas\s+(\S+)", re.IGNORECASE)


def _declared_name(rest: str) -> Optional[str]:
    """Pick the identifier a declaration introduces: alias first, then quoted or bare name."""
    rest = _STEREOTYPE_RE.sub("", rest).strip()
    alias = _ALIAS_RE.search(f" {rest}")
    if alias:
        token = alias.group(1)
    elif rest.startswith('"') and rest.count('"') >= 2:
        token = rest.split('"')[1]
    else:
        token = rest.split()[0] if rest else ""
    name = re.sub(r"\W", "", token.split("#")[0])
    return name if is_identifier(name) else None


def canonicalize_participants(text: str) -> str:
    def fix(line: str) -> str:
        match = _DECLARATION_RE.match(line)
        if not match or "->" in line or "<-" in line:
            return line
        name = _declared_name(match.group("rest"))
        return f"participant {name}" if name else line

    return _map_lines(text, fix)


_REVERSE_ARROW_RE = re.compile(
    rf"^\s*({IDENTIFIER_PATTERN})\s*<([-=]+)\s*({IDENTIFIER_PATTERN})(\s*:.*)?$"
)


def reverse_arrows(text: str) -> str:
    def fix(line: str) -> str:
        match = _REVERSE_ARROW_RE.match(line)
        if not match:
            return line
        target, run, source, rest = match.groups()
        return f"{source} {_arrow_for_run(run)} {target}{rest or ''}"

    return _map_lines(text, fix)


def keep_first_title(text: str) -> str:
    seen = False

    def fix(line: str) -> Optional[str]:
        nonlocal seen
        if not _TITLE_RE.match(line):
            return line
        if seen:
            return None
        seen = True
        return line

    return _map_lines(text, fix)


_DISALLOWED_CHAR_RE = re.compile(r"[^\w\s@\-><:\"']")


def strip_disallowed_characters(text: str) -> str:
    return _DISALLOWED_CHAR_RE.sub("", text)


TOKEN_FIX_RULES: Tuple[RewriteRule, ...] = (
    RewriteRule("drop_style_directives", "Drop skinparam, preprocessor and styling lines", drop_style_directives),
    RewriteRule("remove_stray_markers", "Remove start/end markers that appear inside the body", remove_stray_markers),
    RewriteRule("strip_html_tags", "Remove HTML-like tags and stereotypes", strip_html_tags),
    RewriteRule("strip_braces", "Remove brace characters", strip_braces),
    RewriteRule("canonicalize_participants", "Rewrite actor/class/aliased declarations to participant <id>", canonicalize_participants),
    RewriteRule("reverse_arrows", "Turn B <- A arrows into A -> B", reverse_arrows),
    RewriteRule("keep_first_title", "Drop every title after the first", keep_first_title),
    RewriteRule("strip_disallowed_characters", "Remove characters outside the approved set", strip_disallowed_characters),
)


class PlantUMLSanitizer:
    """
    Applies the sanitization rule chain, and on request the token-level fixes.
    """

    def __init__(
        self,
        rules: Tuple[RewriteRule, ...] = SANITIZE_RULES,
        token_rules: Tuple[RewriteRule, ...] = TOKEN_FIX_RULES,
    ):
        self.rules = rules
        self.token_rules = token_rules

    def sanitize(self, text: str) -> str:
        """Total, deterministic and idempotent cleanup of one fragment."""
        cleaned, _ = self.sanitize_with_report(text)
        return cleaned

    def sanitize_with_report(self, text: str) -> Tuple[str, List[str]]:
        """Sanitize and report the names of the rules that changed the text."""
        cleaned, applied = self._run(self.rules, text or "")
        if applied:
            logger.debug(f"🧹 Sanitized fragment with: {', '.join(applied)}")
        return cleaned, applied

    def fix_tokens(self, text: str) -> Tuple[str, List[str]]:
        """Sanitize, apply the token-level fixes, then sanitize the result again."""
        current, applied = self._run(self.rules, text or "")
        current, token_applied = self._run(self.token_rules, current)
        current, post_applied = self._run(self.rules, current)
        return current, applied + token_applied + post_applied

    @staticmethod
    def _run(rules: Tuple[RewriteRule, ...], text: str) -> Tuple[str, List[str]]:
        applied = []
        for rule in rules:
            rewritten = rule.apply(text)
            if rewritten != text:
                applied.append(rule.name)
                text = rewritten
        return text, applied


# Singleton instance for reuse
_sanitizer_instance = None

def get_plantuml_sanitizer() -> PlantUMLSanitizer:
    """Get singleton PlantUMLSanitizer instance"""
    global _sanitizer_instance
    if _sanitizer_instance is None:
        _sanitizer_instance = PlantUMLSanitizer()
    return _sanitizer_instance


def sanitize(text: str) -> str:
    """Convenience function to sanitize one fragment"""
    return get_plantuml_sanitizer().sanitize(text)


def fix_common_errors(text: str) -> str:
    """Convenience function for sanitize + token-level fixes"""
    fixed, _ = get_plantuml_sanitizer().fix_tokens(text)
    return fixed

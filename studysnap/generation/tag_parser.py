"""
Tolerant parser for the tag-delimited record format.

Models are asked to answer in blocks like::

    [QUESTION]
    What is 2 + 2?
    [ANSWER]
    4
    [OPTION]
    4
    ...
    [END]

and routinely deviate from it: lowercase tags, inline tags, ``[/ANSWER]``
closers, missing terminators. ``normalize_tags`` maps every variant onto the
canonical one-tag-per-line form, then ``parse`` walks each block line by line.

Usage:
    from studysnap.generation.tag_parser import QUIZ_GRAMMAR, parse

    records = parse(raw_text, QUIZ_GRAMMAR)
    for record in records:
        print(record["question"], record["options"])
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from loguru import logger

from studysnap.core.errors import ParsingFailed

RecordValue = Union[str, list[str]]
Record = dict[str, RecordValue]

TERMINATOR = "[END]"


class Tag(str, Enum):
    """Closed set of tags understood by the parser."""

    QUESTION = "QUESTION"
    ANSWER = "ANSWER"
    OPTION = "OPTION"
    EXPLANATION = "EXPLANATION"
    FRONT = "FRONT"
    BACK = "BACK"
    TITLE = "TITLE"
    DESCRIPTION = "DESCRIPTION"
    CATEGORY = "CATEGORY"
    DIFFICULTY = "DIFFICULTY"
    TIME = "TIME"
    ICON = "ICON"

    @property
    def token(self) -> str:
        return f"[{self.value}]"

    @property
    def field_name(self) -> str:
        """Record slot this tag fills."""
        return _FIELD_NAMES.get(self, self.value.lower())


_FIELD_NAMES = {
    Tag.OPTION: "options",
    Tag.TIME: "estimated_time",
}

# Matches [TAG], [ tag ], [/Tag] and the terminator in any case
_TAG_PATTERN = re.compile(
    r"\[\s*(/?)\s*(" + "|".join([t.value for t in Tag] + ["END"]) + r")\s*\]",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RecordGrammar:
    """
    Tag layout of one record kind.

    Args:
        name: Grammar name for logging
        tags: Tags in canonical order
        required: Tags that must carry non-empty text for a record to count
        multi_valued: Tags whose values are appended rather than overwritten
        flush_on_complete: Emit a complete record when one of its tags repeats,
            so back-to-back records without a terminator are split
    """

    name: str
    tags: tuple[Tag, ...]
    required: tuple[Tag, ...]
    multi_valued: frozenset[Tag] = field(default_factory=frozenset)
    flush_on_complete: bool = False

    def tag_for_line(self, line: str) -> Tag | None:
        for tag in self.tags:
            if line == tag.token:
                return tag
        return None

    def is_complete(self, record: Record) -> bool:
        return all(record.get(tag.field_name) for tag in self.required)


QUIZ_GRAMMAR = RecordGrammar(
    name="quiz",
    tags=(Tag.QUESTION, Tag.ANSWER, Tag.OPTION, Tag.EXPLANATION),
    required=(Tag.QUESTION, Tag.ANSWER),
    multi_valued=frozenset({Tag.OPTION}),
)

FLASHCARD_GRAMMAR = RecordGrammar(
    name="flashcards",
    tags=(Tag.FRONT, Tag.BACK),
    required=(Tag.FRONT, Tag.BACK),
    flush_on_complete=True,
)

SUGGESTION_GRAMMAR = RecordGrammar(
    name="suggestions",
    tags=(Tag.TITLE, Tag.DESCRIPTION, Tag.CATEGORY, Tag.DIFFICULTY, Tag.TIME, Tag.ICON),
    required=(Tag.TITLE, Tag.DESCRIPTION),
)


def normalize_tags(text: str) -> str:
    """Force every recognized tag onto its own line and drop closing variants."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1):
            return "\n"
        return f"\n[{match.group(2).upper()}]\n"

    return _TAG_PATTERN.sub(_replace, text)


class _BlockReader:
    """Line state machine for a single terminator-delimited block."""

    def __init__(self, grammar: RecordGrammar):
        self.grammar = grammar
        self.records: list[Record] = []
        self.current: Record = {}
        self.active: Tag | None = None
        self.buffer: list[str] = []

    def _flush_buffer(self) -> None:
        if self.active is None:
            self.buffer = []
            return
        value = "\n".join(self.buffer).strip()
        self.buffer = []
        if not value:
            return
        name = self.active.field_name
        if self.active in self.grammar.multi_valued:
            self.current.setdefault(name, [])
            self.current[name].append(value)  # type: ignore[union-attr]
        else:
            self.current[name] = value

    def _emit(self) -> None:
        if self.current:
            self.records.append(self.current)
        self.current = {}

    def feed(self, line: str) -> None:
        tag = self.grammar.tag_for_line(line.strip())
        if tag is None:
            self.buffer.append(line)
            return

        self._flush_buffer()
        if (
            self.grammar.flush_on_complete
            and tag.field_name in self.current
            and self.grammar.is_complete(self.current)
        ):
            self._emit()
        self.active = tag

    def close(self) -> list[Record]:
        self._flush_buffer()
        self._emit()
        return self.records


def parse(raw_text: str, grammar: RecordGrammar) -> list[Record]:
    """
    Parse model output into records.

    Args:
        raw_text: Raw model output
        grammar: Record layout to parse against

    Returns:
        Accepted records, each a mapping of field name to text
        (or list of texts for multi-valued fields)

    Raises:
        ParsingFailed: If no record has all required fields
    """
    content = normalize_tags(raw_text)
    accepted: list[Record] = []
    dropped = 0

    for block in content.split(TERMINATOR):
        if not block.strip():
            continue
        reader = _BlockReader(grammar)
        for line in block.strip().splitlines():
            reader.feed(line)
        for record in reader.close():
            if grammar.is_complete(record):
                accepted.append(record)
            else:
                dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} incomplete {grammar.name} record(s)")
    if not accepted:
        raise ParsingFailed()

    logger.debug(f"Parsed {len(accepted)} {grammar.name} record(s)")
    return accepted


def render_records(records: list[Record], grammar: RecordGrammar) -> str:
    """Render records back into canonical tag format."""
    lines: list[str] = []
    for record in records:
        for tag in grammar.tags:
            value = record.get(tag.field_name)
            if not value:
                continue
            values = value if isinstance(value, list) else [value]
            for item in values:
                lines.append(tag.token)
                lines.append(item)
        lines.append(TERMINATOR)
    return "\n".join(lines)

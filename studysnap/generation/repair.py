"""
Record repair and normalization.

Turns parsed records into typed records that satisfy their invariants:
- math delimiters use dollar signs (``\\(x\\)`` -> ``$x$``, ``\\[x\\]`` -> ``$$x$$``)
- angle-bracket placeholders echoed from the prompt template are removed
- a question has exactly four options, one of which matches the answer,
  in shuffled order

Whitespace normalization is only used to compare strings; stored text keeps
its formatting.
"""

from __future__ import annotations

import random
import re

from loguru import logger

from studysnap.generation.schemas import FlashcardRecord, QuestionRecord, SuggestionRecord
from studysnap.generation.tag_parser import Record

OPTION_COUNT = 4

_PLACEHOLDER_PATTERN = re.compile(r"<[A-Za-z][^<>\n]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


# =============================================================================
# Text Normalization
# =============================================================================


def normalize_math(text: str) -> str:
    """Rewrite ``\\[ \\]`` and ``\\( \\)`` delimiters into dollar form."""
    return (
        text.replace("\\[", "$$")
        .replace("\\]", "$$")
        .replace("\\(", "$")
        .replace("\\)", "$")
    )


def strip_placeholders(text: str) -> str:
    """Remove template placeholders such as ``<Correct answer text>``."""
    return _PLACEHOLDER_PATTERN.sub("", text).strip()


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def clean_text(text: str) -> str:
    return strip_placeholders(normalize_math(text))


def options_contain_answer(options: list[str], answer: str) -> bool:
    target = normalize_whitespace(answer)
    return any(normalize_whitespace(option) == target for option in options)


# =============================================================================
# Option Repair
# =============================================================================


def repair_options(options: list[str], answer: str, rng: random.Random) -> list[str]:
    """
    Return exactly four distinct options including ``answer``, shuffled.

    Options are deduplicated by their normalized form. A missing answer is
    inserted at the front. Short sets are padded with numbered placeholders;
    long sets keep their first four entries, with the last slot given to the
    answer when the answer only appears further down.
    """
    target = normalize_whitespace(answer)
    unique: list[str] = []
    seen: set[str] = set()
    for option in options:
        key = normalize_whitespace(option)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(option)

    if target not in seen:
        unique.insert(0, answer)
        seen.add(target)

    number = len(unique)
    while len(unique) < OPTION_COUNT:
        number += 1
        filler = f"Option {number}"
        if filler in seen:
            continue
        seen.add(filler)
        unique.append(filler)

    if len(unique) > OPTION_COUNT:
        kept = unique[:OPTION_COUNT]
        if not options_contain_answer(kept, answer):
            answer_option = next(o for o in unique if normalize_whitespace(o) == target)
            kept[-1] = answer_option
        unique = kept

    rng.shuffle(unique)
    return unique


# =============================================================================
# Record Repair
# =============================================================================


def _text(record: Record, name: str) -> str:
    value = record.get(name, "")
    if isinstance(value, list):
        value = value[0] if value else ""
    return clean_text(value)


def repair_question(record: Record, rng: random.Random) -> QuestionRecord | None:
    """Build a QuestionRecord, or None if a required field is empty after cleaning."""
    question = _text(record, "question")
    answer = _text(record, "answer")
    if not question or not answer:
        logger.warning("Discarding question with empty question or answer after cleanup")
        return None

    raw_options = record.get("options", [])
    if isinstance(raw_options, str):
        raw_options = [raw_options]
    options = [clean_text(option) for option in raw_options]
    explanation = _text(record, "explanation") or None

    return QuestionRecord(
        question=question,
        answer=answer,
        options=repair_options(options, answer, rng),
        explanation=explanation,
    )


def repair_flashcard(record: Record) -> FlashcardRecord | None:
    front = _text(record, "front")
    back = _text(record, "back")
    if not front or not back:
        logger.warning("Discarding flashcard with empty side after cleanup")
        return None
    return FlashcardRecord(front=front, back=back)


def repair_suggestion(record: Record) -> SuggestionRecord | None:
    title = _text(record, "title")
    description = _text(record, "description")
    if not title or not description:
        return None

    defaults = SuggestionRecord(title=title, description=description)
    return SuggestionRecord(
        title=title,
        description=description,
        category=_text(record, "category") or defaults.category,
        difficulty=_text(record, "difficulty") or defaults.difficulty,
        estimated_time=_text(record, "estimated_time") or defaults.estimated_time,
        icon=_text(record, "icon") or defaults.icon,
    )

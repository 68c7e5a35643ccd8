"""
Unit tests for the tag-delimited record parser.
"""

import pytest

from studysnap.core.errors import ParsingFailed
from studysnap.generation.tag_parser import (
    FLASHCARD_GRAMMAR,
    QUIZ_GRAMMAR,
    SUGGESTION_GRAMMAR,
    Tag,
    normalize_tags,
    parse,
    render_records,
)


class TestNormalizeTags:
    """Tests for the tag normalization pre-pass."""

    def test_inline_tags_moved_to_own_lines(self):
        """Inline tags end up alone on their lines."""
        text = normalize_tags("[FRONT]A[BACK]B[END]")
        lines = [line for line in text.splitlines() if line.strip()]

        assert lines == ["[FRONT]", "A", "[BACK]", "B", "[END]"]

    def test_case_and_whitespace_variants(self):
        """Lowercase and padded tags map onto the canonical form."""
        text = normalize_tags("[ question ]What?[Answer]Yes[ end]")

        assert "[QUESTION]" in text
        assert "[ANSWER]" in text
        assert "[END]" in text
        assert "question ]" not in text

    def test_closing_variants_dropped(self):
        """Closing tags such as [/ANSWER] disappear."""
        text = normalize_tags("[ANSWER]42[/ANSWER][/END]")

        assert "[/" not in text
        assert "[ANSWER]" in text
        assert "42" in text

    def test_unknown_brackets_untouched(self):
        """Bracketed text that is not a tag is left alone."""
        assert normalize_tags("[ x^2 + 1 ]") == "[ x^2 + 1 ]"

    def test_token_and_field_names(self):
        """Tags expose their token and record slot."""
        assert Tag.QUESTION.token == "[QUESTION]"
        assert Tag.OPTION.field_name == "options"
        assert Tag.TIME.field_name == "estimated_time"
        assert Tag.FRONT.field_name == "front"


class TestParseQuiz:
    """Tests for quiz parsing."""

    def test_well_formed_blocks(self, sample_quiz_output):
        """Four blocks give four records with all fields."""
        records = parse(sample_quiz_output, QUIZ_GRAMMAR)

        assert len(records) == 4
        assert records[0]["question"] == "What is fact 1?"
        assert records[0]["answer"] == "Answer 1"
        assert records[0]["options"] == ["Answer 1", "Wrong 1a", "Wrong 1b", "Wrong 1c"]
        assert records[0]["explanation"] == "Because of fact 1."

    def test_multiline_values_kept(self):
        """Free text spanning lines is accumulated with newlines."""
        raw = "[QUESTION]\nLine one\nLine two\n[ANSWER]\nA\n[END]"
        records = parse(raw, QUIZ_GRAMMAR)

        assert records[0]["question"] == "Line one\nLine two"

    def test_single_valued_tag_overwrites(self):
        """A repeated single-valued tag keeps the last value."""
        raw = "[QUESTION]\nFirst\n[QUESTION]\nSecond\n[ANSWER]\nA\n[END]"
        records = parse(raw, QUIZ_GRAMMAR)

        assert records[0]["question"] == "Second"

    def test_incomplete_record_dropped(self):
        """Blocks missing a required field are discarded whole."""
        raw = "[QUESTION]\nNo answer here\n[END]\n[QUESTION]\nQ\n[ANSWER]\nA\n[END]"
        records = parse(raw, QUIZ_GRAMMAR)

        assert len(records) == 1
        assert records[0]["question"] == "Q"

    def test_empty_tag_value_is_missing(self):
        """A tag followed only by whitespace does not satisfy a requirement."""
        raw = "[QUESTION]\nQ\n[ANSWER]\n   \n[END]"

        with pytest.raises(ParsingFailed):
            parse(raw, QUIZ_GRAMMAR)

    def test_text_before_first_tag_ignored(self):
        """Preamble chatter is not attached to any field."""
        raw = "Sure! Here are your questions:\n[QUESTION]\nQ\n[ANSWER]\nA\n[END]"
        records = parse(raw, QUIZ_GRAMMAR)

        assert records == [{"question": "Q", "answer": "A"}]

    def test_zero_records_raises(self):
        """Output without any usable record is a parsing failure."""
        with pytest.raises(ParsingFailed):
            parse("I cannot help with that.", QUIZ_GRAMMAR)

    def test_empty_output_raises(self):
        """Empty output is a parsing failure, never an empty success."""
        with pytest.raises(ParsingFailed):
            parse("", QUIZ_GRAMMAR)


class TestParseFlashcards:
    """Tests for flashcard parsing."""

    def test_missing_terminators_split_pairs(self):
        """Back-to-back pairs without [END] become separate cards."""
        records = parse("[FRONT]A[BACK]B[FRONT]C[BACK]D", FLASHCARD_GRAMMAR)

        assert records == [{"front": "A", "back": "B"}, {"front": "C", "back": "D"}]

    def test_mixed_case_tags(self, sample_flashcard_output):
        """Lowercase tags parse like canonical ones."""
        records = parse(sample_flashcard_output.lower(), FLASHCARD_GRAMMAR)

        assert len(records) == 2
        assert records[0]["front"] == "mitochondria"

    def test_dangling_front_dropped(self):
        """A trailing front without a back does not become a card."""
        records = parse("[FRONT]A[BACK]B[FRONT]C", FLASHCARD_GRAMMAR)

        assert records == [{"front": "A", "back": "B"}]

    def test_quiz_tags_ignored(self):
        """Tags from another grammar are treated as plain text."""
        with pytest.raises(ParsingFailed):
            parse("[QUESTION]\nQ\n[ANSWER]\nA\n[END]", FLASHCARD_GRAMMAR)


class TestParseSuggestions:
    """Tests for suggestion parsing."""

    def test_required_and_optional_fields(self, sample_suggestion_output):
        """Optional fields are captured when present."""
        records = parse(sample_suggestion_output, SUGGESTION_GRAMMAR)

        assert len(records) == 2
        assert records[0]["category"] == "Mathematics"
        assert records[0]["estimated_time"] == "2-3 hours"
        assert "category" not in records[1]


class TestRenderRoundTrip:
    """Parsing rendered records is stable."""

    def test_quiz_idempotent(self):
        """parse -> render -> parse gives the same records for messy input."""
        raw = (
            "intro text [question] What is $x$? [answer]2[/answer][option]1[option]2"
            "[OPTION]3[explanation]Because.[end][QUESTION]Half a record[END]"
        )
        first = parse(raw, QUIZ_GRAMMAR)
        second = parse(render_records(first, QUIZ_GRAMMAR), QUIZ_GRAMMAR)

        assert second == first

    def test_flashcards_idempotent(self):
        """Rendering inserts terminators between cards."""
        first = parse("[FRONT]A[BACK]B\nmore[FRONT]C[BACK]D", FLASHCARD_GRAMMAR)
        rendered = render_records(first, FLASHCARD_GRAMMAR)

        assert rendered.count("[END]") == 2
        assert parse(rendered, FLASHCARD_GRAMMAR) == first

"""
Request and record types for the generation pipeline.

A ``GenerationRequest`` is immutable and lives for a single public API call.
Parsed records are plain dataclasses with ``to_dict`` for display/export.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger


class ContentType(str, Enum):
    """Kind of content a request asks for."""

    SUMMARY = "summary"
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    TOPIC_GUIDE = "topic_guide"
    TOPIC_QUIZ = "topic_quiz"
    TOPIC_FLASHCARDS = "topic_flashcards"
    TOPIC_SUGGESTIONS = "topic_suggestions"
    CHAT_TURN = "chat_turn"
    CHAT_TO_FLASHCARDS = "chat_to_flashcards"

    @property
    def is_text_block(self) -> bool:
        return self in (ContentType.SUMMARY, ContentType.TOPIC_GUIDE, ContentType.CHAT_TURN)

    @property
    def is_topic_based(self) -> bool:
        return self in (
            ContentType.TOPIC_GUIDE,
            ContentType.TOPIC_QUIZ,
            ContentType.TOPIC_FLASHCARDS,
        )


class SummaryStyle(str, Enum):
    PARAGRAPH = "paragraph"
    BULLETS = "bullets"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class RelativeDifficulty(str, Enum):
    """Difficulty of new items relative to the learner's existing set."""

    EASIER = "easier"
    SAME = "same"
    HARDER = "harder"

    @property
    def label(self) -> str:
        return {
            RelativeDifficulty.EASIER: "Easier",
            RelativeDifficulty.SAME: "Same Difficulty",
            RelativeDifficulty.HARDER: "Harder",
        }[self]

    @property
    def guidance(self) -> str:
        return {
            RelativeDifficulty.EASIER: (
                "Simplify language and focus on foundational, one-step ideas. Avoid edge cases."
            ),
            RelativeDifficulty.SAME: (
                "Match the current difficulty and tone of the learner's existing material."
            ),
            RelativeDifficulty.HARDER: (
                "Increase complexity with multi-step reasoning, trickier distractors, and deeper concepts."
            ),
        }[self]


class TutorResponseFormat(str, Enum):
    """Output shape requested from the tutor."""

    STANDARD = "standard"
    COMPARISON = "comparison"
    MNEMONIC = "mnemonic"
    STEPS = "steps"
    EXAMPLE = "example"
    SIMPLIFY = "simplify"
    KEY_POINTS = "key_points"
    ANALOGY = "analogy"
    MISTAKES = "mistakes"
    MATH_SOLVER = "math_solver"


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class ChatTurn:
    """One message of a tutor conversation."""

    role: str  # "user" or "assistant"
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class TutorContext:
    """Study material the tutor answers from."""

    original_text: str
    summary: str | None = None
    study_set_title: str = ""

    def build_context_string(self) -> str:
        """Render the context block placed in front of the learner's question."""
        parts = ["original_text"]
        context = f"STUDY MATERIAL:\n{self.original_text}"
        if self.summary:
            parts.append("summary")
            context += f"\n\nSUMMARY:\n{self.summary}"

        logger.debug(f"Tutor context [{', '.join(parts)}] for study set: {self.study_set_title}")
        return context


@dataclass(frozen=True)
class GenerationOptions:
    """Configuration bag for a request. Unused fields are ignored per content type."""

    style: SummaryStyle = SummaryStyle.PARAGRAPH
    word_count: int = 150
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    relative_difficulty: RelativeDifficulty | None = None
    count: int = 5
    response_format: TutorResponseFormat = TutorResponseFormat.STANDARD


@dataclass(frozen=True)
class GenerationRequest:
    """
    A single generation request.

    Args:
        content_type: What to generate
        source: Source text, topic name, or text to convert (may be empty for chat)
        options: Style, length, difficulty and count settings
        turns: Conversation history for chat turns
        context: Study material for chat turns
        existing_topics: Topics the learner already studied, for suggestions
    """

    content_type: ContentType
    source: str = ""
    options: GenerationOptions = field(default_factory=GenerationOptions)
    turns: tuple[ChatTurn, ...] = ()
    context: TutorContext | None = None
    existing_topics: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        """Number of records expected from counted content types."""
        if self.content_type == ContentType.TOPIC_SUGGESTIONS:
            return 5
        if self.content_type == ContentType.CHAT_TO_FLASHCARDS:
            return 1
        return max(0, self.options.count)


@dataclass(frozen=True)
class PromptPair:
    """System and user prompt for a single-shot request."""

    system: str
    user: str


# =============================================================================
# Records
# =============================================================================


@dataclass
class QuestionRecord:
    """Multiple choice question. After repair ``options`` holds exactly 4 entries."""

    question: str
    answer: str
    options: list[str] = field(default_factory=list)
    explanation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "answer": self.answer,
            "options": list(self.options),
            "explanation": self.explanation,
        }


@dataclass
class FlashcardRecord:
    front: str
    back: str

    def to_dict(self) -> dict[str, Any]:
        return {"front": self.front, "back": self.back}


@dataclass
class SuggestionRecord:
    """Suggested next topic for the learner."""

    title: str
    description: str
    category: str = "Other"
    difficulty: str = "Intermediate"
    estimated_time: str = "1-2 hours"
    icon: str = "lightbulb"

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "difficulty": self.difficulty,
            "estimated_time": self.estimated_time,
            "icon": self.icon,
        }

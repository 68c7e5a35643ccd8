"""
Synthetic fallback content.

When a request cannot produce real content, the pipeline returns records of
the requested shape that are clearly marked as mock data. Every record
embeds the fallback annotation (error code, error message and a retry
instruction), and text blocks start with a banner. Nothing here raises.
"""

from __future__ import annotations

import random

from studysnap.core.errors import AIError
from studysnap.generation.schemas import (
    ContentType,
    FlashcardRecord,
    GenerationRequest,
    QuestionRecord,
    SuggestionRecord,
)

MOCK_BANNER = "*** ERROR - MOCK DATA ***"

STARTER_TOPICS: tuple[SuggestionRecord, ...] = (
    SuggestionRecord(
        title="Introduction to Machine Learning",
        description="Learn the fundamentals of ML algorithms and their applications",
        category="Technology",
        difficulty="Intermediate",
        estimated_time="2-3 hours",
        icon="brain",
    ),
    SuggestionRecord(
        title="World History: Ancient Civilizations",
        description="Explore the rise and fall of great ancient empires",
        category="History",
        difficulty="Beginner",
        estimated_time="1-2 hours",
        icon="building.columns",
    ),
    SuggestionRecord(
        title="Creative Writing Techniques",
        description="Master storytelling, character development, and narrative structure",
        category="Arts",
        difficulty="Beginner",
        estimated_time="1-2 hours",
        icon="pencil.and.outline",
    ),
    SuggestionRecord(
        title="Basic Economics Principles",
        description="Understand supply, demand, and market dynamics",
        category="Business",
        difficulty="Beginner",
        estimated_time="2-3 hours",
        icon="chart.line.uptrend.xyaxis",
    ),
    SuggestionRecord(
        title="Quantum Physics Basics",
        description="Discover the fascinating world of quantum mechanics",
        category="Science",
        difficulty="Advanced",
        estimated_time="3-4 hours",
        icon="atom",
    ),
)


def error_code(error: BaseException) -> str:
    """Error code and message shown in the annotation."""
    if isinstance(error, AIError):
        return f"{error.code}: {error.message}"
    message = str(error)
    if message:
        return f"{error.__class__.__name__}: {message}"
    return error.__class__.__name__


def fallback_annotation(error: BaseException) -> str:
    return f"*** ERROR - AI Unavailable: Showing MOCK DATA. Error: {error_code(error)}. Please retry. ***"


def mock_text(request: GenerationRequest, error: BaseException) -> str:
    note = fallback_annotation(error)
    header = f"{MOCK_BANNER}\nAI request failed: {error}\n{note}\n\n"

    if request.content_type == ContentType.TOPIC_GUIDE:
        topic = request.source
        return header + (
            f"# Learning Guide: {topic}\n\n"
            f"This is a comprehensive guide to help you learn about {topic}. The guide covers "
            "fundamental concepts, practical applications, and tips for mastery."
        )
    if request.content_type == ContentType.CHAT_TURN:
        return header + "The tutor could not answer right now. Ask your question again in a moment."
    return header + (
        "This is a concise summary of the provided text. The text discusses the importance of "
        "study habits and how using AI can enhance learning efficiency. It covers key topics such "
        "as active recall, spaced repetition, and the benefits of summarising information."
    )


def mock_questions(
    count: int,
    error: BaseException,
    topic: str | None = None,
    rng: random.Random | None = None,
) -> list[QuestionRecord]:
    rng = rng or random.Random()
    note = fallback_annotation(error)
    questions = []
    for i in range(1, count + 1):
        if topic:
            answer = f"Correct answer about {topic} - concept {i}"
            distractors = ["Incorrect option A", "Incorrect option B", "Incorrect option C"]
            prompt = f"Question {i} about {topic}?"
            explanation = f"This is the explanation for question {i} about {topic}."
        else:
            answer = f"The correct answer for question {i}"
            distractors = ["Distractor 1", "Distractor 2", "Distractor 3"]
            prompt = f"What is the key concept in section {i}?"
            explanation = f"This is the explanation for question {i}. It explains why the answer is correct."

        options = distractors + [answer]
        rng.shuffle(options)
        questions.append(
            QuestionRecord(
                question=f"[MOCK DATA] {note}\n\n{prompt}",
                answer=answer,
                options=options,
                explanation=f"{explanation}\n\n{note}",
            )
        )
    return questions


def mock_flashcards(count: int, error: BaseException, topic: str | None = None) -> list[FlashcardRecord]:
    note = fallback_annotation(error)
    cards = []
    for i in range(1, count + 1):
        if topic:
            front = f"Key concept {i} of {topic}"
            back = f"Explanation of concept {i} related to {topic}."
        else:
            front = f"Term {i}"
            back = f"Definition for term {i} derived from the text."
        cards.append(FlashcardRecord(front=front, back=f"{back}\n\n{note}"))
    return cards


def mock_suggestions(count: int, error: BaseException) -> list[SuggestionRecord]:
    """Starter topics, cycled to ``count`` entries, each carrying the annotation."""
    note = fallback_annotation(error)
    suggestions = []
    for i in range(count):
        base = STARTER_TOPICS[i % len(STARTER_TOPICS)]
        suggestions.append(
            SuggestionRecord(
                title=base.title,
                description=f"{base.description}\n\n{note}",
                category=base.category,
                difficulty=base.difficulty,
                estimated_time=base.estimated_time,
                icon=base.icon,
            )
        )
    return suggestions


def mock_for(
    request: GenerationRequest,
    error: BaseException,
    rng: random.Random | None = None,
):
    """Synthetic result matching the request's content type."""
    content_type = request.content_type
    topic = request.source if content_type.is_topic_based else None

    if content_type.is_text_block:
        return mock_text(request, error)
    if content_type in (ContentType.QUIZ, ContentType.TOPIC_QUIZ):
        return mock_questions(request.count, error, topic=topic, rng=rng)
    if content_type in (
        ContentType.FLASHCARDS,
        ContentType.TOPIC_FLASHCARDS,
        ContentType.CHAT_TO_FLASHCARDS,
    ):
        return mock_flashcards(request.count, error, topic=topic)
    return mock_suggestions(request.count, error)

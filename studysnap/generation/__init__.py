"""Study content generation pipeline.

Pipeline:
1. Prompt builders render the tag grammar for the content type
2. The executor runs the prompt on the local or hosted model
3. The tag parser turns raw output into records
4. Repair enforces record invariants (four options, no placeholders)
5. On any failure, mock content marked with the error code is returned

Usage:
    from studysnap.generation import StudyContentService

    async with StudyContentService.from_settings() as service:
        cards = await service.generate_flashcards(text, count=10)
        for card in cards:
            print(f"Q: {card.front}")
            print(f"A: {card.back}")
"""
from studysnap.generation.schemas import (
    ChatTurn,
    ContentType,
    Difficulty,
    FlashcardRecord,
    GenerationOptions,
    GenerationRequest,
    QuestionRecord,
    RelativeDifficulty,
    SuggestionRecord,
    SummaryStyle,
    TutorContext,
    TutorResponseFormat,
)
from studysnap.generation.service import PipelineState, StudyContentService
from studysnap.generation.tutor import QuickPrompt, generate_quick_prompts

__all__ = [
    "ChatTurn",
    "ContentType",
    "Difficulty",
    "FlashcardRecord",
    "GenerationOptions",
    "GenerationRequest",
    "QuestionRecord",
    "RelativeDifficulty",
    "SuggestionRecord",
    "SummaryStyle",
    "TutorContext",
    "TutorResponseFormat",
    "PipelineState",
    "StudyContentService",
    "QuickPrompt",
    "generate_quick_prompts",
]

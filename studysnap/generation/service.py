"""
Public generation API.

Each operation runs one pass of the pipeline::

    IDLE -> SELECTING -> EXECUTING -> PARSING -> REPAIRING -> DONE
                 \\__________ any failure __________/
                              FAULTING -> DONE (mock content)

There is no retry loop. Any AIError (or unexpected exception) is turned into
synthetic content that carries the error code, and a fallback notice is left
in the shared slot for the caller to pop. A missing hosted credential is the
one error that propagates, because only the user can fix it.

Usage:
    from studysnap.generation.service import StudyContentService

    async with StudyContentService.from_settings() as service:
        questions = await service.generate_questions(text, count=5)
        notice = service.pop_fallback_notice()
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from config import Settings, get_settings
from studysnap.core.errors import AIError, MissingCredentialError, ParsingFailed
from studysnap.core.modes import (
    PreferenceStore,
    Provider,
    ProviderChoice,
    SettingsPreferenceStore,
    select_provider,
)
from studysnap.core.notice import FallbackNoticeSlot
from studysnap.generation.executor import RequestExecutor
from studysnap.generation.mock_fallback import fallback_annotation, mock_for
from studysnap.generation.prompts import build_prompts
from studysnap.generation.repair import repair_flashcard, repair_question, repair_suggestion
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
from studysnap.generation.tag_parser import (
    FLASHCARD_GRAMMAR,
    QUIZ_GRAMMAR,
    SUGGESTION_GRAMMAR,
    RecordGrammar,
    parse,
)
from studysnap.generation.tutor import build_chat_prompt
from studysnap.integrations.hosted_client import HostedChatClient
from studysnap.integrations.local_model import (
    LocalModelProvider,
    OllamaLocalModel,
    UnavailableLocalModel,
)

MAX_CONVERTED_FLASHCARDS = 5

_GRAMMARS: dict[ContentType, RecordGrammar] = {
    ContentType.QUIZ: QUIZ_GRAMMAR,
    ContentType.TOPIC_QUIZ: QUIZ_GRAMMAR,
    ContentType.FLASHCARDS: FLASHCARD_GRAMMAR,
    ContentType.TOPIC_FLASHCARDS: FLASHCARD_GRAMMAR,
    ContentType.CHAT_TO_FLASHCARDS: FLASHCARD_GRAMMAR,
    ContentType.TOPIC_SUGGESTIONS: SUGGESTION_GRAMMAR,
}


class PipelineState(str, Enum):
    """State of a single pipeline run."""

    IDLE = "idle"
    SELECTING = "selecting"
    EXECUTING = "executing"
    PARSING = "parsing"
    REPAIRING = "repairing"
    FAULTING = "faulting"
    DONE = "done"


@dataclass
class PipelineRun:
    """Per-call pipeline state."""

    request: GenerationRequest
    state: PipelineState = PipelineState.IDLE
    states: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    choice: ProviderChoice | None = None
    provider_used: Provider | None = None
    error: BaseException | None = None
    pending_notice: str | None = None
    used_fallback: bool = False

    def advance(self, state: PipelineState) -> None:
        self.state = state
        self.states.append(state)

    def note_provider_notice(self, notice: str | None) -> None:
        """Keep the first provider notice raised during this run."""
        if notice and self.pending_notice is None:
            self.pending_notice = notice


class StudyContentService:
    """Generates study content, degrading to marked mock content on failure."""

    def __init__(
        self,
        store: PreferenceStore,
        executor: RequestExecutor,
        notice_slot: FallbackNoticeSlot | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize service.

        Args:
            store: Preference and credential store
            executor: Provider executor
            notice_slot: Shared fallback notice cell
            rng: Random source for option shuffling
        """
        self.store = store
        self.executor = executor
        self.notice_slot = notice_slot or FallbackNoticeSlot()
        self.rng = rng or random.Random()
        self.last_run: PipelineRun | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        local_model: LocalModelProvider | None = None,
    ) -> StudyContentService:
        """Wire the service from application settings."""
        settings = settings or get_settings()
        if local_model is None:
            if settings.local_model_enabled:
                local_model = OllamaLocalModel(
                    settings.local_model,
                    settings.ollama_host,
                    check_timeout=settings.ollama_check_timeout_seconds,
                    request_timeout=settings.ollama_timeout_seconds,
                    availability_ttl=settings.ollama_availability_ttl_seconds,
                )
            else:
                local_model = UnavailableLocalModel("local model disabled in settings")

        store = SettingsPreferenceStore(settings, local_model)
        hosted = HostedChatClient(
            endpoint=settings.hosted_endpoint,
            app_title=settings.hosted_app_title,
            timeout_seconds=settings.hosted_timeout_seconds,
        )
        executor = RequestExecutor(
            store,
            hosted,
            local_model,
            pacing_min_ms=settings.pacing_min_ms,
            pacing_max_ms=settings.pacing_max_ms,
        )
        return cls(store, executor)

    async def close(self) -> None:
        await self.executor.hosted_client.close()

    async def __aenter__(self) -> StudyContentService:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # =========================================================================
    # Fallback notice
    # =========================================================================

    def pop_fallback_notice(self) -> str | None:
        return self.notice_slot.take_and_clear()

    def clear_fallback_notice(self) -> None:
        self.notice_slot.clear()

    async def preview_fallback_notice(self) -> str | None:
        """Notice the current preference would produce, without making a generation call."""
        choice = select_provider(
            self.store.get_preference(),
            await self.store.is_local_model_available(),
        )
        return choice.fallback_notice

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def generate(self, request: GenerationRequest):
        """
        Run the pipeline for one request.

        Returns:
            str for summaries, guides and chat turns; a list of QuestionRecord,
            FlashcardRecord or SuggestionRecord otherwise

        Raises:
            MissingCredentialError: If the hosted model is needed and no key is set
        """
        run = PipelineRun(request=request)
        self.last_run = run
        logger.info(f"Generating {request.content_type.value}")

        try:
            run.advance(PipelineState.SELECTING)
            run.choice = select_provider(
                self.store.get_preference(),
                await self.store.is_local_model_available(),
            )
            run.note_provider_notice(run.choice.fallback_notice)

            run.advance(PipelineState.EXECUTING)
            raw = await self._execute(run)

            run.advance(PipelineState.PARSING)
            parsed = self._parse(request, raw)

            run.advance(PipelineState.REPAIRING)
            result = self._repair(request, parsed)
        except MissingCredentialError as e:
            logger.error(f"Cannot reach hosted model: {e.message}")
            raise
        except AIError as e:
            logger.warning(f"{request.content_type.value} generation failed ({e.code}): {e.message}")
            result = self._fault(run, e)
        except Exception as e:
            logger.exception(f"Unexpected error generating {request.content_type.value}: {e}")
            result = self._fault(run, e)
        else:
            self.notice_slot.set_if_absent(run.pending_notice)

        run.advance(PipelineState.DONE)
        return result

    async def _execute(self, run: PipelineRun) -> str:
        request = run.request
        if request.content_type == ContentType.CHAT_TURN:
            system, turns = build_chat_prompt(request)
        else:
            pair = build_prompts(request)
            system, turns = pair.system, [ChatTurn(role="user", content=pair.user)]

        if run.choice is not None and run.choice.provider == Provider.LOCAL:
            try:
                raw = await self.executor.execute_conversation(system, turns, Provider.LOCAL)
                run.provider_used = Provider.LOCAL
                return raw
            except Exception as e:
                logger.warning(f"Local model failed, falling back to hosted: {e}")
                run.note_provider_notice(
                    f"Local model unavailable ({e}). Falling back to hosted model."
                )

        raw = await self.executor.execute_conversation(system, turns, Provider.HOSTED)
        run.provider_used = Provider.HOSTED
        return raw

    def _parse(self, request: GenerationRequest, raw: str):
        if request.content_type.is_text_block:
            if not raw.strip():
                raise ParsingFailed("model returned empty text")
            return raw
        return parse(raw, _GRAMMARS[request.content_type])

    def _repair(self, request: GenerationRequest, parsed):
        content_type = request.content_type
        if content_type.is_text_block:
            return parsed

        if content_type in (ContentType.QUIZ, ContentType.TOPIC_QUIZ):
            records = [repair_question(record, self.rng) for record in parsed]
        elif content_type == ContentType.TOPIC_SUGGESTIONS:
            records = [repair_suggestion(record) for record in parsed]
        else:
            records = [repair_flashcard(record) for record in parsed]

        repaired = [record for record in records if record is not None]
        if not repaired:
            raise ParsingFailed("no records survived repair")
        if content_type == ContentType.CHAT_TO_FLASHCARDS:
            repaired = repaired[:MAX_CONVERTED_FLASHCARDS]

        logger.info(f"Generated {len(repaired)} {content_type.value} record(s)")
        return repaired

    def _fault(self, run: PipelineRun, error: BaseException):
        run.advance(PipelineState.FAULTING)
        run.error = error
        run.used_fallback = True

        notice = fallback_annotation(error)
        if run.pending_notice:
            notice = f"{notice}\n{run.pending_notice}"
        self.notice_slot.set_if_absent(notice)
        return mock_for(run.request, error, rng=self.rng)

    # =========================================================================
    # Operations
    # =========================================================================

    async def generate_summary(
        self,
        text: str,
        style: SummaryStyle = SummaryStyle.PARAGRAPH,
        word_count: int = 150,
        difficulty: Difficulty = Difficulty.INTERMEDIATE,
    ) -> str:
        options = GenerationOptions(style=style, word_count=word_count, difficulty=difficulty)
        return await self.generate(GenerationRequest(ContentType.SUMMARY, text, options))

    async def generate_questions(
        self,
        text: str,
        count: int = 5,
        relative_difficulty: RelativeDifficulty | None = None,
    ) -> list[QuestionRecord]:
        options = GenerationOptions(count=count, relative_difficulty=relative_difficulty)
        return await self.generate(GenerationRequest(ContentType.QUIZ, text, options))

    async def generate_flashcards(
        self,
        text: str,
        count: int = 5,
        relative_difficulty: RelativeDifficulty | None = None,
    ) -> list[FlashcardRecord]:
        options = GenerationOptions(count=count, relative_difficulty=relative_difficulty)
        return await self.generate(GenerationRequest(ContentType.FLASHCARDS, text, options))

    async def generate_topic_guide(
        self,
        topic: str,
        style: SummaryStyle = SummaryStyle.PARAGRAPH,
        word_count: int = 300,
        difficulty: Difficulty = Difficulty.INTERMEDIATE,
    ) -> str:
        options = GenerationOptions(style=style, word_count=word_count, difficulty=difficulty)
        return await self.generate(GenerationRequest(ContentType.TOPIC_GUIDE, topic, options))

    async def generate_topic_questions(
        self,
        topic: str,
        count: int = 5,
        difficulty: Difficulty = Difficulty.INTERMEDIATE,
    ) -> list[QuestionRecord]:
        options = GenerationOptions(count=count, difficulty=difficulty)
        return await self.generate(GenerationRequest(ContentType.TOPIC_QUIZ, topic, options))

    async def generate_topic_flashcards(
        self,
        topic: str,
        count: int = 5,
        difficulty: Difficulty = Difficulty.INTERMEDIATE,
    ) -> list[FlashcardRecord]:
        options = GenerationOptions(count=count, difficulty=difficulty)
        return await self.generate(GenerationRequest(ContentType.TOPIC_FLASHCARDS, topic, options))

    async def generate_topic_suggestions(
        self, existing_topics: list[str] | None = None
    ) -> list[SuggestionRecord]:
        request = GenerationRequest(
            ContentType.TOPIC_SUGGESTIONS,
            existing_topics=tuple(existing_topics or ()),
        )
        return await self.generate(request)

    async def chat(
        self,
        turns: list[ChatTurn],
        context: TutorContext | None = None,
        response_format: TutorResponseFormat = TutorResponseFormat.STANDARD,
    ) -> str:
        """Answer the latest user turn as the study tutor."""
        request = GenerationRequest(
            ContentType.CHAT_TURN,
            options=GenerationOptions(response_format=response_format),
            turns=tuple(turns),
            context=context,
        )
        return await self.generate(request)

    async def convert_to_flashcards(self, response_text: str) -> list[FlashcardRecord]:
        """Turn a tutor reply into 1-3 flashcards (never more than 5)."""
        return await self.generate(GenerationRequest(ContentType.CHAT_TO_FLASHCARDS, response_text))

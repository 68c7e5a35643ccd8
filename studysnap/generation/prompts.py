"""
Prompt builders for every single-shot content type.

Each builder is pure: it takes the request parameters and returns a
``PromptPair``. User prompts embed the exact tag grammar the parser expects,
the math formatting rules, and style/difficulty/length as hard constraints.

Usage:
    from studysnap.generation.prompts import build_prompts

    pair = build_prompts(request)
    raw = await executor.execute(pair.system, pair.user)
"""

from __future__ import annotations

from studysnap.generation.schemas import (
    ContentType,
    Difficulty,
    GenerationRequest,
    PromptPair,
    RelativeDifficulty,
    SummaryStyle,
)

# =============================================================================
# System Prompts
# =============================================================================

STUDY_ASSISTANT_SYSTEM = (
    "You are a concise study assistant. Produce clean, well-formatted output that follows "
    "instructions exactly. Do not add headings, labels, bullets, or extra commentary."
)

QUIZ_SYSTEM = "You are a precise quiz generator. Output ONLY the requested format. No conversational text."

FLASHCARD_SYSTEM = (
    "You are a precise flashcard generator. Follow the exact tag format. No markdown, no "
    "numbering, no extra prose. Front and back must be plain text."
)

SUGGESTION_SYSTEM = (
    "You are an expert educational advisor. You suggest topics with STRICT tag formatting. "
    "Do not add any text outside the required tags. No markdown headings or bullets outside tags."
)

CONVERT_SYSTEM = "You are a flashcard generator. You MUST output ONLY the exact tag format below. No other text allowed."

# =============================================================================
# Shared Blocks
# =============================================================================

MATH_RULES = """MATH FORMATTING RULES (follow exactly):
- Wrap ALL math expressions in single dollar signs: $...$
- Use \\frac{a}{b} for fractions, NOT a/b for complex fractions
- Use \\sqrt{x} or \\sqrt[n]{x} for roots
- Use \\sum_{i=1}^{n}, \\int_{a}^{b}, \\prod for summation, integrals, products
- Use ^{} for superscripts and _{} for subscripts (e.g., $x^{2}$, $a_{n}$)
- Use \\left( and \\right) for auto-sizing parentheses
- Use \\cdot for multiplication, \\times for cross product
- Greek letters: \\alpha, \\beta, \\pi, \\theta, \\Delta, etc.
- Examples: $\\frac{-b \\pm \\sqrt{b^{2} - 4ac}}{2a}$, $\\int_{0}^{\\infty} e^{-x^{2}} dx$"""

QUIZ_FORMAT = """STRICT OUTPUT FORMAT (Tag-based):

[QUESTION]
Question text
[ANSWER]
Correct answer text
[OPTION]
Correct answer text
[OPTION]
Distractor 1
[OPTION]
Distractor 2
[OPTION]
Distractor 3
[EXPLANATION]
Explanation
[END]

RULES:
1. Use [QUESTION], [ANSWER], [OPTION], [EXPLANATION], [END] tags exactly as shown.
2. Put content on the lines following the tags. Do NOT wrap content in < > brackets.
3. Provide exactly 4 [OPTION] tags. One MUST match [ANSWER] exactly.
4. MATH: Use LaTeX with single dollar signs ($...$) for ALL math.
   - CORRECT: $x^2 + 2x$
   - WRONG: \\[ x^2 + 2x \\]
   - WRONG: [ x^2 + 2x ]
   - WRONG: \\( x^2 + 2x \\)
5. Do not use markdown code blocks (```).
6. Ensure there are exactly 4 options for every question."""


def _flashcard_format(count: int) -> str:
    return f"""Use the following EXACT format for each flashcard (no extra blank lines between tags):

[FRONT]
Term text
[BACK]
Definition text
[END]

IMPORTANT - FOLLOW ALL:
1) Do NOT use JSON or markdown.
2) Do NOT use headings (#, ##) or bold/italics. No numbering of cards.
3) Do NOT include TeX/LaTeX math in FRONT or BACK. Use plain text only.
4) Keep the 'front' very short (3-9 words) and the 'back' concise (under 20 words).
5) Keep EXACT tags as shown. No extra tags or bullets.
6) Produce exactly {count} flashcards.

GOOD EXAMPLE (copy structure, change content):
[FRONT]
Factorising purpose
[BACK]
Reveal common factors to simplify.
[END]"""


SUGGESTION_FORMAT = """Use the following EXACT format for each suggestion (no extra blank lines between tags):

[TITLE]
Topic title (3-7 words)
[DESCRIPTION]
Brief description of what they'll learn (1-2 sentences)
[CATEGORY]
One of: Technology, Science, History, Arts, Business, Language, Health, Mathematics, Philosophy, or Other
[DIFFICULTY]
One of: Beginner, Intermediate, or Advanced
[TIME]
Estimated study time (e.g., "1-2 hours", "2-3 hours")
[ICON]
Icon name (e.g., brain, atom, building.columns, chart.line.uptrend.xyaxis, book, globe, heart, function, lightbulb)
[END]

IMPORTANT - FOLLOW ALL:
1) Do NOT use JSON or markdown.
2) Keep EXACT tags as shown. No extra tags or bullets.
3) Make topics diverse and interesting.
4) Only use icon names from the examples above."""


# =============================================================================
# Instruction Helpers
# =============================================================================


def style_instruction(style: SummaryStyle, prose: bool = False) -> str:
    if style == SummaryStyle.BULLETS:
        return (
            "FORMAT AS BULLETS ONLY. Each bullet must be its own line and start with '- ' exactly. "
            "No numbering. No paragraph text. Do NOT break bullets across multiple lines. "
            "Example exactly:\n- Key idea one\n- Key idea two\n- Key idea three"
        )
    if prose:
        return (
            "FORMAT AS PROSE (PARAGRAPHS). Use standard paragraphs to structure the content. "
            "ABSOLUTELY NO BULLET POINTS. NO LISTS. Write in full sentences."
        )
    return (
        "FORMAT AS ONE SINGLE PARAGRAPH (4-7 sentences). ABSOLUTELY NO BULLET POINTS. NO LISTS. "
        "NO HEADINGS. NO EXTRA SECTIONS. Just one continuous block of text."
    )


def language_instruction(difficulty: Difficulty) -> str:
    return {
        Difficulty.BEGINNER: "Use simple language suitable for a beginner. Avoid jargon where possible.",
        Difficulty.INTERMEDIATE: "Use standard language suitable for an intermediate learner.",
        Difficulty.ADVANCED: "Use advanced, academic language suitable for an expert.",
    }[difficulty]


def length_instruction(word_count: int) -> str:
    low = max(80, word_count - 30)
    return f"Target length: aim for {low}-{word_count + 30} words (soft target, stay concise)."


def relative_difficulty_instruction(relative: RelativeDifficulty | None) -> str:
    if relative is None:
        return "Difficulty: Match the current set's complexity."
    return f"Difficulty adjustment: {relative.label}. {relative.guidance}"


TOPIC_QUIZ_DIFFICULTY = {
    Difficulty.BEGINNER: "Create basic questions testing fundamental understanding.",
    Difficulty.INTERMEDIATE: "Create moderately challenging questions testing practical application.",
    Difficulty.ADVANCED: "Create challenging questions testing deep understanding and edge cases.",
}

TOPIC_FLASHCARD_DIFFICULTY = {
    Difficulty.BEGINNER: "Focus on basic terminology and fundamental concepts.",
    Difficulty.INTERMEDIATE: "Include practical applications and important techniques.",
    Difficulty.ADVANCED: "Cover advanced concepts, nuances, and expert-level knowledge.",
}


# =============================================================================
# Builders
# =============================================================================


def summary_prompt(
    text: str,
    style: SummaryStyle = SummaryStyle.PARAGRAPH,
    word_count: int = 150,
    difficulty: Difficulty = Difficulty.INTERMEDIATE,
) -> PromptPair:
    user = f"""Summarise the following text. Follow formatting instructions EXACTLY. Do NOT add headings or labels. Keep it tight and avoid filler.
{style_instruction(style)}
{length_instruction(word_count)}
Difficulty level: {difficulty.label} ({language_instruction(difficulty)}).

{MATH_RULES}

Text:
{text}"""
    return PromptPair(system=STUDY_ASSISTANT_SYSTEM, user=user)


def quiz_prompt(text: str, count: int, relative: RelativeDifficulty | None = None) -> PromptPair:
    user = f"""Generate {count} multiple choice study questions based on the text below.

{relative_difficulty_instruction(relative)}

{QUIZ_FORMAT}

Text:
{text}"""
    return PromptPair(system=QUIZ_SYSTEM, user=user)


def flashcard_prompt(text: str, count: int, relative: RelativeDifficulty | None = None) -> PromptPair:
    user = f"""Generate {count} flashcards (like in Quizlet) based on the following text.

{relative_difficulty_instruction(relative)}

{_flashcard_format(count)}

{MATH_RULES}

Text:
{text}"""
    return PromptPair(system=FLASHCARD_SYSTEM, user=user)


def topic_guide_prompt(
    topic: str,
    style: SummaryStyle = SummaryStyle.PARAGRAPH,
    word_count: int = 300,
    difficulty: Difficulty = Difficulty.INTERMEDIATE,
) -> PromptPair:
    user = f"""Create a comprehensive learning guide about: {topic}
Follow formatting instructions EXACTLY. Do NOT add headings or labels. Keep it tight and avoid filler.
{style_instruction(style, prose=True)}
{length_instruction(word_count)}
Difficulty level: {difficulty.label} ({language_instruction(difficulty)}).

Structure your guide to include these sections in order (use plain text paragraphs; do not use bullet points):
1. A brief introduction to the topic
2. Key concepts and fundamentals
3. Step-by-step instructions or explanations (if applicable)
4. Common mistakes to avoid or tips for success
5. How to practice or apply this knowledge

{MATH_RULES}"""
    return PromptPair(system=STUDY_ASSISTANT_SYSTEM, user=user)


def topic_quiz_prompt(topic: str, count: int, difficulty: Difficulty = Difficulty.INTERMEDIATE) -> PromptPair:
    user = f"""Generate {count} multiple choice study questions about: {topic}

Difficulty: {difficulty.label} - {TOPIC_QUIZ_DIFFICULTY[difficulty]}

{QUIZ_FORMAT}"""
    return PromptPair(system=QUIZ_SYSTEM, user=user)


def topic_flashcard_prompt(
    topic: str, count: int, difficulty: Difficulty = Difficulty.INTERMEDIATE
) -> PromptPair:
    user = f"""Generate {count} flashcards (like in Quizlet) about: {topic}

Difficulty: {difficulty.label} - {TOPIC_FLASHCARD_DIFFICULTY[difficulty]}

{_flashcard_format(count)}

{MATH_RULES}"""
    return PromptPair(system=FLASHCARD_SYSTEM, user=user)


def topic_suggestions_prompt(existing_topics: list[str] | tuple[str, ...]) -> PromptPair:
    if existing_topics:
        history = f"The user has studied: {', '.join(existing_topics)}"
    else:
        history = "The user is new and has no study history."

    user = f"""{history}

Suggest 5 interesting and diverse topics for the user to learn next. Make sure topics are different from what they've already studied.

{SUGGESTION_FORMAT}"""
    return PromptPair(system=SUGGESTION_SYSTEM, user=user)


def convert_to_flashcards_prompt(response_text: str) -> PromptPair:
    user = f"""Convert this into flashcards. Create only as many as truly needed (1-3 max). If one flashcard captures it well, just make one.

Output ONLY this format, nothing else:

[FRONT]
short term or question
[BACK]
brief answer
[END]

EXAMPLE OUTPUT:
[FRONT]
What is photosynthesis?
[BACK]
Process where plants convert sunlight to energy using chlorophyll.
[END]

STRICT RULES:
- Start IMMEDIATELY with [FRONT] - no intro text
- Each [FRONT] must have exactly one [BACK] and one [END]
- Front: 2-8 words (term or question)
- Back: 5-20 words (definition or answer)
- NO markdown, NO bullets, NO numbering
- Create 1-3 cards only (not more)

TEXT TO CONVERT:
{response_text}"""
    return PromptPair(system=CONVERT_SYSTEM, user=user)


def build_prompts(request: GenerationRequest) -> PromptPair:
    """
    Build the prompt pair for a single-shot request.

    Chat turns are conversational and built by ``tutor.build_chat_prompt``.

    Raises:
        ValueError: For chat turns
    """
    opts = request.options
    content_type = request.content_type

    if content_type == ContentType.SUMMARY:
        return summary_prompt(request.source, opts.style, opts.word_count, opts.difficulty)
    if content_type == ContentType.QUIZ:
        return quiz_prompt(request.source, request.count, opts.relative_difficulty)
    if content_type == ContentType.FLASHCARDS:
        return flashcard_prompt(request.source, request.count, opts.relative_difficulty)
    if content_type == ContentType.TOPIC_GUIDE:
        return topic_guide_prompt(request.source, opts.style, opts.word_count, opts.difficulty)
    if content_type == ContentType.TOPIC_QUIZ:
        return topic_quiz_prompt(request.source, request.count, opts.difficulty)
    if content_type == ContentType.TOPIC_FLASHCARDS:
        return topic_flashcard_prompt(request.source, request.count, opts.difficulty)
    if content_type == ContentType.TOPIC_SUGGESTIONS:
        return topic_suggestions_prompt(request.existing_topics)
    if content_type == ContentType.CHAT_TO_FLASHCARDS:
        return convert_to_flashcards_prompt(request.source)
    raise ValueError(f"No single-shot prompt for content type: {content_type.value}")

"""
Tutor chat prompts and quick-prompt suggestions.

The tutor answers questions about a study set. Its system prompt carries the
response rules plus a format block chosen by ``TutorResponseFormat``; the
study material travels with the learner's latest question instead of the
system prompt.
"""

from __future__ import annotations

from dataclasses import dataclass

from studysnap.generation.schemas import (
    ChatTurn,
    GenerationRequest,
    TutorContext,
    TutorResponseFormat,
)

TUTOR_SYSTEM_TEMPLATE = """You are a concise study tutor. Follow these rules EXACTLY:

CRITICAL RULES:
1. Start with content immediately. NEVER say "Certainly", "Sure", "Here's", etc.
2. MAXIMUM 100 words total unless solving a math problem. Be extremely concise.
3. Use **bold** for key terms only.
4. Use • for bullets, numbered lists (1. 2. 3.) for steps.
5. Never echo instructions or study set name.

MATH FORMATTING (CRITICAL - use LaTeX with $ delimiters):
- Wrap ALL math expressions in single dollar signs: $...$
- Fractions: $\\frac{{a}}{{b}}$ (NOT a/b for complex fractions)
- Exponents: $x^{{2}}$, $e^{{-x}}$
- Roots: $\\sqrt{{x}}$, $\\sqrt[3]{{x}}$
- Greek: $\\alpha$, $\\beta$, $\\pi$, $\\theta$
- Operators: $\\times$, $\\div$, $\\pm$, $\\cdot$
- Example: The quadratic formula is $x = \\frac{{-b \\pm \\sqrt{{b^{{2}} - 4ac}}}}{{2a}}$

MATH PROBLEM DETECTION:
If the user asks to solve, calculate, or work out a specific math problem (equation, expression, word problem with numbers), you MUST:
1. Start your response with [MATHSTEP] tag
2. Show step-by-step solution with each step numbered
3. Use → to show transformations
4. End with [SOLUTION] tag containing the final answer
5. Optionally add [TIP] with the key concept used

SECTION HEADINGS MUST BE TAGS like [SKILL], [STEPS], [SOLUTION] (no markdown bold headings, no colons).
Tags are optional for simple conversational responses.

{format_block}"""

FORMAT_INSTRUCTIONS: dict[TutorResponseFormat, str] = {
    TutorResponseFormat.STANDARD: """For general questions, respond in 2-4 sentences. Max 80 words.
If you need to list points, start with [KEYPOINTS] tag.
If explaining steps, start with [STEPS] tag.
Otherwise, just answer directly without any tags.""",
    TutorResponseFormat.COMPARISON: """YOU MUST START YOUR RESPONSE WITH: [COMPARE]

EXACT FORMAT:
[COMPARE]
**[Topic A]** vs **[Topic B]**
[KEYPOINTS]
• **Similarity**: [What they share]
• **Difference**: [How A differs] vs [How B differs]
• **Difference**: [Another contrast]
[SUMMARY]
[One sentence: the key distinction.]

All tags MUST be ALL CAPS. Max 80 words total.""",
    TutorResponseFormat.MNEMONIC: """YOU MUST START YOUR RESPONSE WITH: [MNEMONIC]

EXACT FORMAT:
[MNEMONIC]
**[Catchy phrase or acronym]**
[BREAKDOWN]
• [Letter/Word] → [What it stands for]
• [Letter/Word] → [What it stands for]
[TIP]
[One sentence on why this helps you remember.]

All tags MUST be ALL CAPS. Max 80 words total.""",
    TutorResponseFormat.STEPS: """YOU MUST START YOUR RESPONSE WITH: [STEPS]

EXACT FORMAT:
[STEPS]
1. **[Action verb]**: [Brief explanation]
2. **[Action verb]**: [Brief explanation]
3. **[Action verb]**: [Brief explanation]

Max 5 steps. Each step = ONE line only. Max 80 words total.""",
    TutorResponseFormat.EXAMPLE: """YOU MUST START YOUR RESPONSE WITH: [SCENARIO]

EXACT FORMAT:
[SCENARIO]
[A relatable real-world situation in 1-2 sentences]
[CONNECTION]
[How it connects to the concept in 1-2 sentences]
[TAKEAWAY]
[One sentence lesson.]

All tags MUST be ALL CAPS. Max 80 words total.""",
    TutorResponseFormat.SIMPLIFY: """YOU MUST START YOUR RESPONSE WITH: [SIMPLE]

EXACT FORMAT:
[SIMPLE]
[2-3 sentences explaining in everyday language. No jargon. Like explaining to a friend who knows nothing about this.]

Max 60 words after the tag.""",
    TutorResponseFormat.KEY_POINTS: """YOU MUST START YOUR RESPONSE WITH: [KEYPOINTS]

EXACT FORMAT:
[KEYPOINTS]
• [Most important point]
• [Second point]
• [Third point]

Max 4 bullets. Each bullet = one clear sentence. Max 60 words total.""",
    TutorResponseFormat.ANALOGY: """YOU MUST START YOUR RESPONSE WITH: [ANALOGY]

EXACT FORMAT:
[ANALOGY]
**[Familiar comparison - kitchen, sports, daily life]**
[MAPPING]
• [Concept part] ↔ [Analogy part]
• [Concept part] ↔ [Analogy part]
[INSIGHT]
[One sentence takeaway.]

All tags MUST be ALL CAPS. Max 80 words total.""",
    TutorResponseFormat.MISTAKES: """YOU MUST START YOUR RESPONSE WITH: [MISTAKES]

EXACT FORMAT:
[MISTAKES]
✗ **[Error 1]** → [Why it's wrong]
✓ [How to do it correctly]
✗ **[Error 2]** → [Why it's wrong]
✓ [How to do it correctly]
[EXAMPLE]
[One concrete worked example: "e.g., To simplify 12/18: GCF=6, so 12/6=2, 18/6=3, answer=2/3"]

All tags MUST be ALL CAPS. Max 2 mistakes. Max 100 words total.""",
    TutorResponseFormat.MATH_SOLVER: """YOU MUST START YOUR RESPONSE WITH: [MATHSTEP]

You are solving a specific math problem step by step. Break it down clearly.

FORMAT:
[MATHSTEP]
**Problem:** [Restate the problem briefly]

**Step 1:** [Description of what you're doing]
→ $[LaTeX expression showing the work]$

**Step 2:** [Next operation]
→ $[LaTeX expression]$

[SOLUTION]
**Answer:** $[Final answer in LaTeX]$

[TIP]
[One sentence explaining the key concept or method used.]

Keep steps atomic (one operation per step). Maximum 6 steps.""",
}


def tutor_system_prompt(response_format: TutorResponseFormat = TutorResponseFormat.STANDARD) -> str:
    return TUTOR_SYSTEM_TEMPLATE.format(format_block=FORMAT_INSTRUCTIONS[response_format])


def augment_turns(turns: list[ChatTurn] | tuple[ChatTurn, ...], context: TutorContext | None) -> list[ChatTurn]:
    """Wrap the latest user message with the study material block."""
    augmented = list(turns)
    if context is None:
        return augmented

    for index in range(len(augmented) - 1, -1, -1):
        if augmented[index].role == "user":
            question = augmented[index].content
            augmented[index] = ChatTurn(
                role="user",
                content=(
                    f"[CONTEXT]\n{context.build_context_string()}\n[END CONTEXT]\n\n"
                    f"[QUESTION]\n{question}"
                ),
            )
            break
    return augmented


def build_chat_prompt(request: GenerationRequest) -> tuple[str, list[ChatTurn]]:
    """System prompt and augmented history for a chat turn."""
    system = tutor_system_prompt(request.options.response_format)
    return system, augment_turns(request.turns, request.context)


# =============================================================================
# Quick Prompts
# =============================================================================


@dataclass(frozen=True)
class QuickPrompt:
    """Canned tutor question offered as a one-tap suggestion."""

    id: str
    label: str
    icon: str
    prompt: str
    format: TutorResponseFormat


BASE_QUICK_PROMPTS: tuple[QuickPrompt, ...] = (
    QuickPrompt("simplify", "Simplify", "lightbulb.min",
                "Explain the main concept here in the simplest possible terms.",
                TutorResponseFormat.SIMPLIFY),
    QuickPrompt("example", "Example", "globe",
                "Give me a real-world example of this concept.",
                TutorResponseFormat.EXAMPLE),
    QuickPrompt("mnemonic", "Memory trick", "brain.head.profile",
                "What's a catchy phrase or mnemonic that could help me study and remember the main ideas here?",
                TutorResponseFormat.MNEMONIC),
    QuickPrompt("compare", "Compare", "arrow.left.arrow.right",
                "Contrast the two main ideas: where are they similar, where do they differ?",
                TutorResponseFormat.COMPARISON),
    QuickPrompt("steps", "Step by step", "list.number",
                "Break down the main process or concept into clear steps.",
                TutorResponseFormat.STEPS),
    QuickPrompt("keypoints", "Key points", "list.bullet",
                "What are the most important points I need to know?",
                TutorResponseFormat.KEY_POINTS),
    QuickPrompt("analogy", "Analogy", "arrow.triangle.branch",
                "Help me understand this using a familiar everyday comparison.",
                TutorResponseFormat.ANALOGY),
    QuickPrompt("mistakes", "Common mistakes", "exclamationmark.triangle",
                "What are the top mistakes, how to fix them, and one quick example?",
                TutorResponseFormat.MISTAKES),
    QuickPrompt("mathsolve", "Solve math", "function",
                "Solve this math problem step by step, showing all work.",
                TutorResponseFormat.MATH_SOLVER),
    QuickPrompt("why", "Why it matters", "questionmark.circle",
                "In one paragraph (max 60 words), explain why this topic matters.",
                TutorResponseFormat.SIMPLIFY),
    QuickPrompt("formula", "Formulas", "function",
                "List the key formulas as bullets with what each variable means.",
                TutorResponseFormat.KEY_POINTS),
    QuickPrompt("cheatsheet", "Cheat sheet", "note.text",
                "Give me a tiny cheat sheet: 5 bullets max with the most actionable reminders.",
                TutorResponseFormat.KEY_POINTS),
)

MAX_QUICK_PROMPTS = 12

# keyword groups -> prompt ids moved to the front, in order
_KEYWORD_PRIORITIES: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("why", "how"), ("simplify", "steps", "why")),
    (("remember", "memorize"), ("mnemonic",)),
    (("difference", "compare", "vs"), ("compare",)),
    (("wrong", "mistake", "error"), ("mistakes", "cheatsheet")),
)


def generate_quick_prompts(partial_input: str = "") -> list[QuickPrompt]:
    """
    Quick prompts ordered by relevance to what the learner is typing.

    Args:
        partial_input: Text currently in the chat input box

    Returns:
        Up to 12 prompts, keyword matches first
    """
    text = partial_input.lower()
    if not text:
        return list(BASE_QUICK_PROMPTS[:MAX_QUICK_PROMPTS])

    by_id = {prompt.id: prompt for prompt in BASE_QUICK_PROMPTS}
    ordered: list[QuickPrompt] = []
    for keywords, prompt_ids in _KEYWORD_PRIORITIES:
        if any(keyword in text for keyword in keywords):
            for prompt_id in prompt_ids:
                if by_id[prompt_id] not in ordered:
                    ordered.append(by_id[prompt_id])

    ordered.extend(prompt for prompt in BASE_QUICK_PROMPTS if prompt not in ordered)
    return ordered[:MAX_QUICK_PROMPTS]

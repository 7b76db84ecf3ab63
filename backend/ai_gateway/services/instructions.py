"""
AI Gateway — Instruction Composer
==================================

What:  Builds the system instruction sent with every upstream call.
How:   Four sections in fixed order, separated by a blank line:
           1. role line + one-sentence task
           2. output formatting contract
           3. anti-fabrication contract
           4. tuning sentences, one per preference field that is set
       Tuning only appends; the first three sections never depend on
       preferences, so the untuned instruction is a prefix of the tuned one.
"""

from typing import List, Optional

from ai_gateway.schemas.requests import PreferenceProfile

SECTION_SEPARATOR = "\n\n"

FORMATTING_CONTRACT = (
    "Format your answer in Markdown using only headings, bulleted or numbered lists, "
    "bold text, inline code and fenced code blocks. Do not use tables, raw HTML or "
    "horizontal rules. Do not leave more than one blank line between blocks."
)

ANTI_FABRICATION_CONTRACT = (
    "Only state what the provided material or well-established knowledge supports. "
    "If the information is insufficient to answer, say so explicitly instead of "
    "guessing, and never invent facts, quotes, figures or sources."
)

TONE_HINTS = {
    "formal": "Use a formal, courteous tone.",
    "casual": "Use a relaxed, conversational tone.",
    "friendly": "Use a warm, friendly tone.",
    "professional": "Use a clear, professional tone.",
    "witty": "Use a light, witty tone while staying accurate.",
}

LENGTH_HINTS = {
    "concise": "Keep the answer concise: cover only the essentials.",
    "detailed": "Give a detailed answer that covers the important points.",
    "comprehensive": "Give a comprehensive answer that covers the topic in depth.",
}

EXPERTISE_HINTS = {
    "beginner": "Assume the reader is a beginner: avoid jargon and define any term you use.",
    "intermediate": "Assume the reader has working familiarity with the subject.",
    "expert": "Assume the reader is an expert: be precise and skip introductory material.",
}


def compose(role: str, core_task: str, prefs: Optional[PreferenceProfile] = None) -> str:
    """
    Compose a system instruction.

    Args:
        role:      Persona line, e.g. "You are a careful technical editor."
        core_task: One sentence describing the job for this operation.
        prefs:     Optional user preferences; only fields that are set add text.
    """
    sections = [
        f"{role.strip()} {core_task.strip()}",
        FORMATTING_CONTRACT,
        ANTI_FABRICATION_CONTRACT,
    ]
    tuning = _tuning_clauses(prefs)
    if tuning:
        sections.append(" ".join(tuning))
    return SECTION_SEPARATOR.join(sections)


def _tuning_clauses(prefs: Optional[PreferenceProfile]) -> List[str]:
    if prefs is None or prefs.is_empty():
        return []
    clauses = []
    if prefs.tone:
        clauses.append(TONE_HINTS[prefs.tone])
    if prefs.response_length:
        clauses.append(LENGTH_HINTS[prefs.response_length])
    if prefs.expertise:
        clauses.append(EXPERTISE_HINTS[prefs.expertise])
    if prefs.language:
        clauses.append(f"Write the entire answer in {prefs.language}.")
    return clauses

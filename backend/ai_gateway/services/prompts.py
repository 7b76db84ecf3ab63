"""
AI Gateway — Prompt Templates
==============================

Role lines, task sentences and user-content templates for the six operations.
Wording here is product content; the services only interpolate into it.
"""

from typing import Optional

# ── Chat ──────────────────────────────────────────────────────────────────
CHAT_ROLE = "You are a knowledgeable, helpful assistant inside a note-taking app."
CHAT_TASK = "Answer the user's message accurately, using the notes context when it is provided."

CHAT_WITH_CONTEXT = """Context from the notes the user selected:

{context}

---

Using the context above, answer the user's message:

{message}"""

# ── Summarize ─────────────────────────────────────────────────────────────
SUMMARIZE_ROLE = "You are an expert at summarizing documents."
SUMMARIZE_TASK = "Summarize the given text faithfully, keeping the most important information."

SUMMARIZE_TEMPLATE = """Summarize the following text in about {max_length} words.

Structure the summary with these sections:
## Overview
## Key Points
## Notable Facts
## Conclusion

Text:

{text}"""

# ── Create note ───────────────────────────────────────────────────────────
NOTE_ROLE = "You are a professional note-taking assistant."
NOTE_TASK = "Turn the given text into a well-organized, easy-to-review note."

NOTE_TEMPLATE = """Create a structured note from the following text.

Organize it as:
## Goal
One sentence on what the material is about.
## Sections
Hierarchical headings with bullet points for the main content.
## Insights
The non-obvious takeaways.
## Action Items
Concrete next steps, or "None" if there are none.

Text:

{text}"""

# ── Explain ───────────────────────────────────────────────────────────────
EXPLAIN_ROLE = "You are a patient, dedicated teacher."
EXPLAIN_TASK = "Explain the given text so that it is easy to understand."

EXPLAIN_TEMPLATE = """Explain the following text in four parts:
## Simple Definition
## Analogy
## How It Works
## Why It Matters

Text:

{text}"""

# ── Improve writing ───────────────────────────────────────────────────────
IMPROVE_ROLE = "You are an expert copy editor."

STYLE_DESCRIPTIONS = {
    "formal": "formal and courteous",
    "casual": "friendly and natural",
    "academic": "academic and rigorous",
    "professional": "professional and clear",
}

IMPROVE_TASK = (
    "Rewrite the given text in a {style} style, preserving its meaning while "
    "making it clearer and better written."
)

IMPROVE_TEMPLATE = """Rewrite the following text in a {style} style.
Return only the full rewritten text, with no commentary, notes or explanation of changes.

Text:

{text}"""

# ── Translate ─────────────────────────────────────────────────────────────
TRANSLATE_ROLE = "You are a professional translator."
TRANSLATE_TASK = "Translate the given text accurately and naturally into {language}."

TRANSLATE_TEMPLATE = """Translate the following text into {language}.
Preserve the original formatting (headings, lists, line breaks, code).
Keep technical terms, code, product names and anything without a standard
translation in their original form.
Return only the translation.

Text:

{text}"""

# ── Fallbacks when the model returns no text ──────────────────────────────
EMPTY_RESPONSES = {
    "chat": "Sorry, I couldn't generate a response.",
    "summarize": "Unable to summarize the text.",
    "create_note": "Unable to create a note from the text.",
    "explain": "Unable to explain the text.",
    "improve_writing": "Unable to improve the text.",
    "translate": "Unable to translate the text.",
}


def chat_prompt(message: str, context: Optional[str] = None) -> str:
    if context and context.strip():
        return CHAT_WITH_CONTEXT.format(context=context.strip(), message=message)
    return message

"""
AI Gateway — Package Initializer
=================================

What: Generative-text request gateway for the notes product.
Why:  Turns one "ask the AI to do X" call into a reliable request against a
      pool of rate-limited Gemini API keys.

Architecture Note:

    ┌─────────────────────────────────────┐
    │   GeminiService (operation surface) │  ← six public operations
    ├─────────────────────────────────────┤
    │ compose() │ select_tier() │ prompts │  ← pure, no I/O
    ├─────────────────────────────────────┤
    │        FailoverOrchestrator         │  ← rotation, cooldown, budget
    ├─────────────────────────────────────┤
    │   CredentialPool │ RotationState    │  ← keys + shared health state
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

"""
AI Gateway — Request Schemas
=============================

What:  Pydantic models for the per-call inputs of the operation surface.
Why:   Preferences and attachments arrive from many product callers; validating
       them once here keeps the services free of ad-hoc checks.
Who:   Built by callers; consumed by GeminiService and the instruction composer.
When:  Constructed and discarded within a single call. Nothing here is stored.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ai_gateway.exceptions import ValidationError

Tone = Literal["formal", "casual", "friendly", "professional", "witty"]
ResponseLength = Literal["concise", "detailed", "comprehensive"]
Expertise = Literal["beginner", "intermediate", "expert"]
WritingStyle = Literal["formal", "casual", "academic", "professional"]
OperationName = Literal[
    "chat", "summarize", "create_note", "explain", "improve_writing", "translate"
]

# Media types the product accepts for chat attachments
ALLOWED_ATTACHMENT_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/markdown",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})

# 20 MiB per file
MAX_ATTACHMENT_BYTES = 20 * 1024 * 1024


class PreferenceProfile(BaseModel):
    """
    What:  Optional per-user tuning for generated answers.
    How:   Every field is optional; absent fields add nothing to the instruction.
    """
    tone: Optional[Tone] = Field(default=None, description="Voice of the answer")
    response_length: Optional[ResponseLength] = Field(
        default=None, description="How long answers should be"
    )
    expertise: Optional[Expertise] = Field(
        default=None, description="Reader's familiarity with the subject"
    )
    language: Optional[str] = Field(
        default=None, description="Language the answer must be written in"
    )

    model_config = {"frozen": True}

    @field_validator("language")
    @classmethod
    def blank_language_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.tone, self.response_length, self.expertise, self.language)
        )


class Attachment(BaseModel):
    """
    What:  A binary file sent inline alongside a chat message.
    Why validated here: the upstream call would fail anyway, but only after
        a key has been spent on it.
    """
    mime_type: str = Field(description="Declared media type of the file")
    data: bytes = Field(description="Raw file content")
    file_name: Optional[str] = Field(default=None)

    model_config = {"frozen": True}

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        normalized = v.strip().lower()
        if normalized not in ALLOWED_ATTACHMENT_TYPES:
            raise ValueError(f"Unsupported attachment type '{v}'")
        return normalized

    @field_validator("data")
    @classmethod
    def validate_size(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("Attachment is empty")
        if len(v) > MAX_ATTACHMENT_BYTES:
            raise ValueError(
                f"Attachment is {len(v)} bytes; the limit is {MAX_ATTACHMENT_BYTES} bytes"
            )
        return v

    @classmethod
    def build(
        cls, mime_type: str, data: bytes, file_name: Optional[str] = None
    ) -> "Attachment":
        """Construct an attachment, converting pydantic errors to ValidationError."""
        try:
            return cls(mime_type=mime_type, data=data, file_name=file_name)
        except ValueError as e:
            # pydantic's ValidationError subclasses ValueError
            raise ValidationError(
                message=f"Invalid attachment {file_name or ''}".strip(),
                field="attachments",
                context={"detail": str(e)},
            ) from e


class OperationRequest(BaseModel):
    """
    What:  One logical "ask the AI to do X" call, as a value.
    Who:   Built by product code that routes on an action name (through
           OperationRequest.build()); executed by GeminiService.run().
    """
    operation: OperationName
    text: str = Field(description="Primary payload: the message or the text to process")
    context: Optional[str] = Field(default=None, description="Chat only: notes context")
    attachments: List[Attachment] = Field(default_factory=list)
    preferences: Optional[PreferenceProfile] = None
    max_length: int = Field(default=300, description="Summarize only: target length in words")
    style: WritingStyle = Field(default="professional", description="Improve only")
    target_language: Optional[str] = Field(default=None, description="Translate only")

    @field_validator("operation", mode="before")
    @classmethod
    def resolve_alias(cls, v):
        # Product action names differ from method names for two operations
        aliases = {"note": "create_note", "improve": "improve_writing"}
        if isinstance(v, str):
            return aliases.get(v.strip().lower(), v.strip().lower())
        return v

    @classmethod
    def build(cls, **fields: Any) -> "OperationRequest":
        """
        Construct a request, converting pydantic errors to ValidationError.

        Product code should build requests this way so that a bad attachment
        or preference surfaces as a GatewayError like every other input error.
        """
        try:
            return cls(**fields)
        except ValueError as e:
            field = None
            if isinstance(e, PydanticValidationError) and e.errors():
                location = e.errors()[0].get("loc") or ()
                field = str(location[0]) if location else None
            raise ValidationError(
                message=f"Invalid {field or 'request'}",
                field=field,
                context={"detail": str(e)},
            ) from e

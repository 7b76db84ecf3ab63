"""
AI Gateway — Schemas Package
=============================

What:  Pydantic models describing what callers hand to the operation surface.
"""

from ai_gateway.schemas.requests import (
    ALLOWED_ATTACHMENT_TYPES,
    MAX_ATTACHMENT_BYTES,
    Attachment,
    OperationRequest,
    PreferenceProfile,
)

__all__ = [
    "ALLOWED_ATTACHMENT_TYPES",
    "MAX_ATTACHMENT_BYTES",
    "Attachment",
    "OperationRequest",
    "PreferenceProfile",
]

"""Pydantic models for API I/O."""

from .envelope import Envelope, ErrorEnvelope
from .history import TeamHistoryResponse

__all__ = [
    "Envelope",
    "ErrorEnvelope",
    "TeamHistoryResponse",
]

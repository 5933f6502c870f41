from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    success: bool = True
    message: str = ""
    data: Any = None


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class RecipeImportRequest(BaseModel):
    url: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None

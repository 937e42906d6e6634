"""Data models for the feasibility engine."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class FeasibilityResult(BaseModel):
    """Words still formable from the current grid and blank pattern."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(default=0, ge=0)
    words: List[str] = Field(default_factory=list)

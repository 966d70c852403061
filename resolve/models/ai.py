from typing import List

from sqlmodel import Field, SQLModel


class ClassificationResult(SQLModel):
    category: str = Field(default="General")
    confidence: float = Field(default=0.5, ge=0, le=1)
    tags: List[str] = Field(default_factory=list)
    priority_score: float = Field(default=50, ge=0, le=100)
    predicted_hours: float = Field(default=24, ge=0)

    @classmethod
    def fallback(cls) -> "ClassificationResult":
        """Classification used whenever the gateway cannot be reached"""
        return cls()


class ReplySuggestions(SQLModel):
    formal: str
    friendly: str
    empathetic: str

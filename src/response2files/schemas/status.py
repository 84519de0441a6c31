"""Schemas for streaming progress queries."""

from typing import Optional

from pydantic import Field

from .result import CamelModel


class StreamingStatus(CamelModel):
    """Per-file progress derived from a ParseResult and the files already rendered."""

    pending: list[str] = Field(default_factory=list, description="Planned, not started")
    streaming: list[str] = Field(default_factory=list, description="Opened, not finished")
    complete: list[str] = Field(default_factory=list, description="Fully extracted")


class StreamPlan(CamelModel):
    """File plan read from a response that is still streaming."""

    create: list[str] = Field(default_factory=list)
    delete: list[str] = Field(default_factory=list)
    total: int = 0
    completed: list[str] = Field(default_factory=list)
    sizes: dict[str, int] = Field(default_factory=dict)
    source: Optional[str] = Field(default=None, description="'json', 'comment' or 'marker'")

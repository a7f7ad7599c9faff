"""Pydantic models for the ingestion data flow."""

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """A bounded, line-numbered slice of a document.

    ``content`` carries one ``Line N: <text>`` row per source line so
    the model can cite original line numbers.
    """

    index: int = Field(ge=1)
    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)
    content: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

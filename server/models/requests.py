from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    limit: int | None = Field(default=None, ge=1, le=100)
    category: str | None = None


class IngestRequest(BaseModel):
    path: str | None = None
    reset: bool = False

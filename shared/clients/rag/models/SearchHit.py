from pydantic import BaseModel


class SearchHit(BaseModel):
    """A single similarity search hit as returned by a RAG backend."""

    id: str | int
    score: float
    payload: dict = {}

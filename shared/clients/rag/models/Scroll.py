from pydantic import BaseModel, Field


class ScrollPage(BaseModel):
    """One page of points returned by a scroll request.

    ``next_offset`` is the backend cursor to pass to the following request,
    None once the last page has been read.
    """

    points: list[dict] = Field(default_factory=list)
    next_offset: str | int | None = None

    @property
    def payloads(self) -> list[dict]:
        return [point.get("payload") or {} for point in self.points]

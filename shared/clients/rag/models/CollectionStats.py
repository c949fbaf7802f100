from pydantic import BaseModel

NOT_CREATED_STATUS = "not_created"


class CollectionStats(BaseModel):
    """Point count and health of a collection.

    A missing collection is reported as points_count=0 and status="not_created"
    rather than as an error.
    """

    points_count: int = 0
    status: str = NOT_CREATED_STATUS

    @classmethod
    def not_created(cls) -> "CollectionStats":
        return cls(points_count=0, status=NOT_CREATED_STATUS)

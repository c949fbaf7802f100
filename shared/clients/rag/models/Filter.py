"""Backend-agnostic payload filter expressions.

Filters are validated here before a RAG client translates them to its wire
format, so a typo in a field name fails locally instead of silently matching
nothing in the store.
"""

from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

from shared.clients.rag.models.VectorPoint import ChunkPayload

FilterValue = str | int | bool


class FilterCondition(BaseModel):
    """A single condition on one payload field.

    Attributes:
        field:    Payload key, must be a ChunkPayload field.
        operator: "eq" for an exact match, "any" for membership in a list of values.
        value:    Scalar for "eq", non-empty list for "any".
    """

    field: str
    operator: Literal["eq", "any"] = "eq"
    value: FilterValue | list[FilterValue]

    @field_validator("field")
    @classmethod
    def _known_field(cls, v: str) -> str:
        if v not in ChunkPayload.model_fields:
            raise ValueError(f"Unknown payload field '{v}'")
        return v

    @model_validator(mode="after")
    def _value_matches_operator(self) -> "FilterCondition":
        if self.operator == "eq" and isinstance(self.value, list):
            raise ValueError("Operator 'eq' expects a single value")
        if self.operator == "any" and (not isinstance(self.value, list) or not self.value):
            raise ValueError("Operator 'any' expects a non-empty list of values")
        return self


class FilterExpression(BaseModel):
    """Conjunction of conditions; every condition must hold for a point to match."""

    must: list[FilterCondition] = []

    @classmethod
    def match(cls, field: str, value: FilterValue) -> "FilterExpression":
        """Shorthand for a single exact-match condition."""
        return cls(must=[FilterCondition(field=field, operator="eq", value=value)])

    def is_empty(self) -> bool:
        return not self.must

from typing import Literal

from pydantic import BaseModel, model_validator

from shared.helper.HelperConfig import HelperConfig


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required by a client.

    Attributes:
        env_key (str): The raw key of the setting; clients prefix it with their type and engine.
        val_type (str): The expected type of the value ("string", "number", "bool" or "list").
        default (str | int | float | bool | list | None): Default value. None marks the setting as required.
    """

    env_key: str
    val_type: Literal["string", "number", "bool", "list"]
    default: str | int | float | bool | list | None = None


class KnowledgeConfig(BaseModel):
    """
    Pipeline settings shared by ingestion and retrieval.

    Attributes:
        documents_path (str): Default ingest root when none is given explicitly.
        chunk_size (int): Target chunk length in characters.
        chunk_overlap (int): Characters shared by neighbouring chunks. Must be smaller than chunk_size.
        top_k (int): Default number of search results.
        score_threshold (float): Minimum similarity score for search results.
        deterministic_point_ids (bool): Derive point ids from document id and chunk index
            so that re-ingesting overwrites instead of appending.
    """

    documents_path: str = "./knowledge_docs"
    chunk_size: int = 1000
    chunk_overlap: int = 100
    top_k: int = 5
    score_threshold: float = 0.5
    deterministic_point_ids: bool = False

    @model_validator(mode="after")
    def _check_overlap(self) -> "KnowledgeConfig":
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be >= 0 and less than chunk_size ({self.chunk_size})"
            )
        return self

    @classmethod
    def from_helper_config(cls, helper_config: HelperConfig) -> "KnowledgeConfig":
        """Build the pipeline settings from KNOWLEDGE_* environment variables."""
        return cls(
            documents_path=helper_config.get_string_val("KNOWLEDGE_DOCUMENTS_PATH", default="./knowledge_docs"),
            chunk_size=int(helper_config.get_number_val("KNOWLEDGE_CHUNK_SIZE", default=1000, min_val=1)),
            chunk_overlap=int(helper_config.get_number_val("KNOWLEDGE_CHUNK_OVERLAP", default=100, min_val=0)),
            top_k=int(helper_config.get_number_val("KNOWLEDGE_TOP_K", default=5, min_val=1)),
            score_threshold=float(
                helper_config.get_number_val("KNOWLEDGE_SCORE_THRESHOLD", default=0.5, min_val=0.0, max_val=1.0)
            ),
            deterministic_point_ids=helper_config.get_bool_val("KNOWLEDGE_DETERMINISTIC_POINT_IDS", default=False),
        )

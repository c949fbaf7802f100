"""Unit tests for shared.helper.HelperConfig and shared.models.config."""

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import KnowledgeConfig


def _config(logger, **env) -> HelperConfig:
    return HelperConfig(logger=logger, env=env)


@pytest.mark.unit
class TestHelperConfig:
    """Tests for typed environment getters."""

    def test_string_value_and_default(self, logger):
        config = _config(logger, NAME="  qdrant ")

        assert config.get_string_val("name") == "qdrant"
        assert config.get_string_val("OTHER", default="fallback") == "fallback"

    def test_empty_string_counts_as_unset(self, logger):
        config = _config(logger, NAME="   ")

        assert config.get_string_val("NAME", default="fallback") == "fallback"

    def test_missing_required_value_raises(self, logger):
        with pytest.raises(ValueError):
            _config(logger).get_string_val("MISSING")

    def test_number_parsing(self, logger):
        config = _config(logger, SIZE="500", THRESHOLD="0.75")

        assert config.get_number_val("SIZE") == 500
        assert config.get_number_val("THRESHOLD") == 0.75

    def test_number_out_of_bounds(self, logger):
        with pytest.raises(ValueError):
            _config(logger, SIZE="0").get_number_val("SIZE", min_val=1)

    def test_invalid_number(self, logger):
        with pytest.raises(ValueError):
            _config(logger, SIZE="large").get_number_val("SIZE")

    def test_bool_values(self, logger):
        config = _config(logger, A="true", B="Yes", C="0")

        assert config.get_bool_val("A") is True
        assert config.get_bool_val("B") is True
        assert config.get_bool_val("C") is False
        assert config.get_bool_val("D", default=False) is False

    def test_list_values(self, logger):
        assert _config(logger, EXT="[.pdf, .txt,]").get_list_val("EXT") == [".pdf", ".txt"]

    def test_list_without_brackets_is_rejected(self, logger):
        with pytest.raises(ValueError):
            _config(logger, EXT=".pdf,.txt").get_list_val("EXT")


@pytest.mark.unit
class TestKnowledgeConfig:
    """Tests for pipeline settings validation."""

    def test_defaults(self, logger):
        config = KnowledgeConfig.from_helper_config(_config(logger))

        assert config.chunk_size == 1000
        assert config.chunk_overlap == 100
        assert config.top_k == 5
        assert config.score_threshold == 0.5
        assert config.deterministic_point_ids is False

    def test_reads_environment(self, logger):
        config = KnowledgeConfig.from_helper_config(_config(
            logger,
            KNOWLEDGE_DOCUMENTS_PATH="/srv/docs",
            KNOWLEDGE_CHUNK_SIZE="500",
            KNOWLEDGE_CHUNK_OVERLAP="50",
            KNOWLEDGE_DETERMINISTIC_POINT_IDS="true",
        ))

        assert config.documents_path == "/srv/docs"
        assert config.chunk_size == 500
        assert config.chunk_overlap == 50
        assert config.deterministic_point_ids is True

    def test_overlap_must_be_smaller_than_chunk_size(self, logger):
        with pytest.raises(ValueError):
            KnowledgeConfig.from_helper_config(_config(logger, KNOWLEDGE_CHUNK_SIZE="100", KNOWLEDGE_CHUNK_OVERLAP="100"))

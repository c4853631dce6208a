"""Tests for svmblock.types — IndexingMode and ParserConfig validation."""
from __future__ import annotations

import dataclasses

import pytest

from svmblock.errors import ConfigurationError
from svmblock.types import IndexingMode, ParserConfig


class TestIndexingMode:
    def test_from_int(self) -> None:
        assert IndexingMode.from_int(1) is IndexingMode.ONE_BASED
        assert IndexingMode.from_int(7) is IndexingMode.ONE_BASED
        assert IndexingMode.from_int(0) is IndexingMode.ZERO_BASED
        assert IndexingMode.from_int(-1) is IndexingMode.AUTO

    def test_parse_names_and_numbers(self) -> None:
        assert IndexingMode.parse("auto") is IndexingMode.AUTO
        assert IndexingMode.parse(" One_Based ") is IndexingMode.ONE_BASED
        assert IndexingMode.parse("-1") is IndexingMode.AUTO
        assert IndexingMode.parse("1") is IndexingMode.ONE_BASED
        assert IndexingMode.parse(0) is IndexingMode.ZERO_BASED
        assert IndexingMode.parse(IndexingMode.AUTO) is IndexingMode.AUTO

    def test_parse_unknown(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown indexing mode"):
            IndexingMode.parse("sideways")


class TestParserConfig:
    def test_defaults(self) -> None:
        config = ParserConfig()
        assert config.format == "libsvm"
        assert config.indexing_mode is IndexingMode.ZERO_BASED
        assert config.comment == b"#"
        assert config.strict_pairs is False

    def test_frozen(self) -> None:
        config = ParserConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.format = "other"  # type: ignore[misc]

    def test_rejects_format(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported format"):
            ParserConfig(format="libfm")

    def test_rejects_int_indexing_mode(self) -> None:
        with pytest.raises(ConfigurationError, match="IndexingMode"):
            ParserConfig(indexing_mode=-1)  # type: ignore[arg-type]

    def test_rejects_bad_comment(self) -> None:
        with pytest.raises(ConfigurationError, match="comment"):
            ParserConfig(comment=b"//")
        with pytest.raises(ConfigurationError, match="comment"):
            ParserConfig(comment=b" ")

    def test_rejects_str_comment(self) -> None:
        with pytest.raises(ConfigurationError, match="comment"):
            ParserConfig(comment="#")  # type: ignore[arg-type]

    def test_rejects_bad_policy(self) -> None:
        with pytest.raises(ConfigurationError, match="on_incomplete_pair"):
            ParserConfig(on_incomplete_pair="ignore")  # type: ignore[arg-type]

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ParserConfig(format="csv")


class TestFromMapping:
    def test_string_options(self) -> None:
        config = ParserConfig.from_mapping(
            {"format": "libsvm", "indexing_mode": "-1", "on_incomplete_pair": "error"},
        )
        assert config.indexing_mode is IndexingMode.AUTO
        assert config.strict_pairs is True

    def test_comment_option(self) -> None:
        assert ParserConfig.from_mapping({"comment": "%"}).comment == b"%"

    def test_non_ascii_comment_option(self) -> None:
        with pytest.raises(ConfigurationError, match="ASCII"):
            ParserConfig.from_mapping({"comment": "\u00a7"})

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError, match="indexing"):
            ParserConfig.from_mapping({"indexing": "1"})

    def test_bad_format(self) -> None:
        with pytest.raises(ConfigurationError):
            ParserConfig.from_mapping({"format": "csv"})

"""Tests for core/store.py — per-environment features files."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from envflags.core.config import ToolConfig
from envflags.core.errors import FeaturesFileCorruptError
from envflags.core.models import FeatureDocument, FeatureRecord
from envflags.core.store import FeatureStore

from conftest import record, write_features


class TestLoad:
    """Tests for FeatureStore.load."""

    def test_missing_file_is_none(self, config: ToolConfig) -> None:
        """An absent file loads as None and is not created."""
        store = FeatureStore(config)

        assert store.load("dev") is None
        assert not config.features_file("dev").exists()

    def test_load_or_create(self, config: ToolConfig) -> None:
        """load_or_create returns an empty document for an absent file."""
        doc = FeatureStore(config).load_or_create("test")
        assert isinstance(doc, FeatureDocument)
        assert len(doc) == 0

    def test_reads_records(self, config: ToolConfig) -> None:
        write_features(config, "prod", [record("Checkout", True)])

        doc = FeatureStore(config).load("prod")

        assert doc.names() == ["Checkout"]
        assert doc.find("Checkout").created_by == "Original Author"

    def test_corrupt_json_is_fatal(self, config: ToolConfig) -> None:
        """Malformed JSON raises instead of being treated as empty."""
        path = config.features_file("dev")
        path.parent.mkdir(parents=True)
        path.write_text("not valid json", encoding="utf-8")

        with pytest.raises(FeaturesFileCorruptError):
            FeatureStore(config).load("dev")

    def test_invalid_utf8_is_fatal(self, config: ToolConfig) -> None:
        """Bytes that are not UTF-8 are reported as a corrupt file."""
        path = config.features_file("dev")
        path.parent.mkdir(parents=True)
        path.write_bytes(b'{"Features": [\xff]}')

        with pytest.raises(FeaturesFileCorruptError, match="Invalid UTF-8"):
            FeatureStore(config).load("dev")

    def test_non_boolean_enabled_is_fatal(self, config: ToolConfig) -> None:
        """A hand-edited string state is rejected rather than coerced."""
        write_features(config, "dev", [record("Checkout", "false")])

        with pytest.raises(FeaturesFileCorruptError, match="non-boolean"):
            FeatureStore(config).load("dev")

    def test_non_object_record_is_fatal(self, config: ToolConfig) -> None:
        write_features(config, "dev", [1])

        with pytest.raises(FeaturesFileCorruptError):
            FeatureStore(config).load("dev")

    def test_wrong_shape_is_fatal(self, config: ToolConfig) -> None:
        """A JSON array is not a features document."""
        path = config.features_file("dev")
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(FeaturesFileCorruptError):
            FeatureStore(config).load("dev")


class TestSave:
    """Tests for FeatureStore.save."""

    def test_creates_directory_and_file(self, config: ToolConfig) -> None:
        """Saving creates config/ and writes two-space indented JSON."""
        doc = FeatureDocument(features=[FeatureRecord.create("Checkout", True, "Jane", now="T0")])

        assert asyncio.run(FeatureStore(config).save(doc, "dev")) is True

        text = config.features_file("dev").read_text(encoding="utf-8")
        assert text.startswith('{\n  "Features": [\n    {\n      "name": "Checkout"')
        assert json.loads(text) == doc.to_dict()

    def test_overwrites_and_leaves_no_temp_file(self, config: ToolConfig) -> None:
        write_features(config, "dev", [record("Old", True)])
        doc = FeatureDocument(features=[FeatureRecord.create("New", False, "Jane")])

        asyncio.run(FeatureStore(config).save(doc, "dev"))

        assert [p.name for p in config.config_dir.iterdir()] == ["features.dev.json"]
        assert FeatureStore(config).load("dev").names() == ["New"]

    def test_logs_confirmation(self, config: ToolConfig, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="envflags.core.store"):
            asyncio.run(FeatureStore(config).save(FeatureDocument(), "test"))

        assert "features.test.json updated" in caplog.text

    def test_write_failure_is_logged_not_raised(
        self, config: ToolConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unwritable target is reported through the return value."""
        # A file where the config directory should be makes mkdir fail.
        config.config_dir.parent.mkdir(parents=True, exist_ok=True)
        config.config_dir.write_text("in the way", encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="envflags.core.store"):
            saved = asyncio.run(FeatureStore(config).save(FeatureDocument(), "dev"))

        assert saved is False
        assert "Failed to write" in caplog.text

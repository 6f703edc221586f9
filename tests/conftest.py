"""Shared fixtures for the features tool tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from envflags.core.config import ToolConfig
from envflags.core.dispatcher import Dispatcher
from envflags.core.identity import StaticIdentityProvider


@pytest.fixture
def config(tmp_path: Path) -> ToolConfig:
    """Config rooted in a temporary project directory."""
    return ToolConfig(root=tmp_path)


@pytest.fixture
def dispatcher(config: ToolConfig) -> Dispatcher:
    """Dispatcher that records the identity "Jane Doe"."""
    return Dispatcher(config, identity=StaticIdentityProvider("Jane Doe"))


def write_features(config: ToolConfig, env: str, records: list[dict]) -> Path:
    """Write a features file for ``env`` and return its path."""
    path = config.features_file(env)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"Features": records}, indent=2), encoding="utf-8")
    return path


def read_features(config: ToolConfig, env: str) -> list[dict]:
    """Return the raw record list stored for ``env``."""
    return json.loads(config.features_file(env).read_text(encoding="utf-8"))["Features"]


def record(name: str, enabled: bool, **overrides) -> dict:
    """Build a raw record as it appears on disk."""
    data = {
        "name": name,
        "createdOn": "2024-01-01T00:00:00.000Z",
        "createdBy": "Original Author",
        "updatedOn": None,
        "updatedBy": None,
        "enabled": enabled,
    }
    data.update(overrides)
    return data

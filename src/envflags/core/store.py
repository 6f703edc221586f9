"""Environment flag store — one JSON features file per environment.

Reads are synchronous. Writes run in the default executor so the
dispatcher can start every environment's save and join them together.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from envflags.core.errors import FeaturesFileCorruptError
from envflags.core.models import FeatureDocument

if TYPE_CHECKING:
    from pathlib import Path

    from envflags.core.config import ToolConfig

logger = logging.getLogger(__name__)


class FeatureStore:
    """Loads and saves ``features.<env>.json`` documents."""

    def __init__(self, config: ToolConfig) -> None:
        self.config = config

    def path_for(self, environment: str) -> Path:
        return self.config.features_file(environment)

    def exists(self, environment: str) -> bool:
        return self.path_for(environment).exists()

    def load(self, environment: str) -> FeatureDocument | None:
        """Load an environment's document.

        Args:
            environment: Environment identifier, e.g. ``"dev"``.

        Returns:
            The parsed document, or None if the file does not exist.

        Raises:
            FeaturesFileCorruptError: If the file is not a valid features document.
        """
        path = self.path_for(environment)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return FeatureDocument.from_dict(data)
        except json.JSONDecodeError as e:
            raise FeaturesFileCorruptError(f"Invalid JSON in {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise FeaturesFileCorruptError(f"Invalid UTF-8 in {path}: {e}") from e
        except OSError as e:
            raise FeaturesFileCorruptError(f"Cannot read {path}: {e}") from e
        except (TypeError, KeyError, AttributeError) as e:
            raise FeaturesFileCorruptError(f"Malformed features document {path}: {e}") from e

    def load_or_create(self, environment: str) -> FeatureDocument:
        """Load an environment's document, or return an empty one."""
        document = self.load(environment)
        return document if document is not None else FeatureDocument()

    async def save(self, document: FeatureDocument, environment: str) -> bool:
        """Write a document to its environment's file.

        Failures are logged and reported through the return value; they are
        never raised.

        Returns:
            True if the file was written.
        """
        path = self.path_for(environment)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _write_json, path, document.to_dict())
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            return False

        logger.info(f"Config {path} updated")
        return True


def _write_json(path: Path, data: dict) -> None:
    """Atomically replace ``path`` with ``data`` serialized at two-space indent."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    tmp.replace(path)

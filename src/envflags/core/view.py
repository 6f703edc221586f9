"""Render the development flags into the client-readable view file."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import jinja2

from envflags.core.errors import ViewRenderError

if TYPE_CHECKING:
    from pathlib import Path

    from envflags.core.config import ToolConfig
    from envflags.core.models import FeatureDocument

logger = logging.getLogger(__name__)


class ViewGenerator:
    """Renders a features document through a Jinja2 template."""

    def __init__(self, config: ToolConfig) -> None:
        self.template_path: Path = config.template_path
        self.output_path: Path = config.output_path
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.template_path.parent)),
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
            autoescape=False,
        )

    def render(self, document: FeatureDocument) -> str:
        """Render ``document`` to view source text.

        The template sees the serialized document, so ``Features`` is the
        list of record objects exactly as stored in the JSON file.

        Raises:
            ViewRenderError: If the template is missing or fails to render.
        """
        try:
            template = self._env.get_template(self.template_path.name)
            return template.render(**document.to_dict())
        except jinja2.TemplateError as e:
            raise ViewRenderError(f"Cannot render {self.template_path}: {e}") from e

    async def generate(self, document: FeatureDocument) -> bool:
        """Render and write the view file. Errors are logged, not raised.

        Returns:
            True if the view file was written.
        """
        try:
            view = self.render(document)
        except ViewRenderError as e:
            logger.error(str(e))
            return False

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _write_text, self.output_path, view)
        except OSError as e:
            logger.error(f"Failed to write {self.output_path}: {e}")
            return False

        logger.info(f"{self.output_path} generated")
        return True


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")

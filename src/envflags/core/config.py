"""Immutable tool configuration.

All paths are derived from a single project root so that the tool can be
pointed at any checkout (and at ``tmp_path`` in tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_ENVIRONMENTS: tuple[str, ...] = ("dev", "test", "prod")

# Mask positions are read by environment index; the trailing slot is reserved.
MASK_LENGTH = 4
DEFAULT_MASK = "T***"

DEFAULT_TEMPLATE = Path(__file__).resolve().parent.parent / "templates" / "features.js.j2"


@dataclass(frozen=True)
class ToolConfig:
    """Where the features files live and how the view is generated.

    Attributes:
        root: Project directory holding ``config/`` and ``lib/``.
        environments: Ordered environment identifiers; the order defines mask positions.
        config_dir: Directory of the ``features.<env>.json`` files.
        template_path: Jinja2 template used for the generated view.
        output_path: Destination of the generated view.
        view_environment: Environment whose successful save triggers the view.
    """

    root: Path = field(default_factory=Path.cwd)
    environments: tuple[str, ...] = DEFAULT_ENVIRONMENTS
    config_dir: Path | None = None
    template_path: Path = DEFAULT_TEMPLATE
    output_path: Path | None = None
    view_environment: str = "dev"

    def __post_init__(self) -> None:
        # Frozen, so derived defaults are set through object.__setattr__.
        if self.config_dir is None:
            object.__setattr__(self, "config_dir", self.root / "config")
        if self.output_path is None:
            object.__setattr__(self, "output_path", self.root / "lib" / "features.generated.js")
        if len(self.environments) >= MASK_LENGTH:
            raise ValueError(f"At most {MASK_LENGTH - 1} environments fit in a mask")
        if self.view_environment not in self.environments:
            raise ValueError(f"Unknown view environment: {self.view_environment}")

    def features_file(self, environment: str) -> Path:
        """Return the features file path for an environment."""
        return self.config_dir / f"features.{environment}.json"

    def environment_index(self, environment: str) -> int:
        """Return the mask position of an environment."""
        return self.environments.index(environment)

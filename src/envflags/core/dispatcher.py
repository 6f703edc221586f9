"""Command dispatcher — runs add, remove or set across every environment.

Commands are checked in priority order add > remove > set and exactly one
runs. All documents are loaded before any write starts, and every write is
awaited before the command returns.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from envflags.core.config import DEFAULT_MASK, ToolConfig
from envflags.core.errors import FeaturesFileMissingError, FlagNotFoundError
from envflags.core.identity import CommandIdentityProvider, IdentityProvider
from envflags.core.models import FeatureDocument
from envflags.core.reconcile import add_or_update, environment_flag, remove, validate_mask
from envflags.core.store import FeatureStore
from envflags.core.view import ViewGenerator

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """What happened to one environment's features file."""

    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FlagCommand:
    """Parsed command-line request.

    Attributes:
        flag: Flag name.
        mask: Environment mask, or None for the default.
        add: Add the flag (or update it where it already exists).
        remove: Remove the flag from every environment.
        set: Change the state of an existing flag.
        set_value: Value given to ``-s``; picks the default mask when ``mask`` is None.
    """

    flag: str
    mask: str | None = None
    add: bool = False
    remove: bool = False
    set: bool = False
    set_value: bool = True

    def __post_init__(self) -> None:
        if self.mask is not None:
            validate_mask(self.mask)

    @property
    def command(self) -> str | None:
        if self.add:
            return "add"
        if self.remove:
            return "remove"
        if self.set:
            return "set"
        return None

    def effective_mask(self) -> str:
        if self.mask is not None:
            return self.mask
        if self.set and not self.add and not self.set_value:
            return "F" + DEFAULT_MASK[1:]
        return DEFAULT_MASK


@dataclass
class OperationResult:
    """Per-environment outcome of a command."""

    command: str
    flag: str
    outcomes: dict[str, Outcome] = field(default_factory=dict)
    view_generated: bool = False

    @property
    def ok(self) -> bool:
        return Outcome.FAILED not in self.outcomes.values()

    @property
    def saved(self) -> list[str]:
        return [env for env, outcome in self.outcomes.items() if outcome is Outcome.SAVED]


class Dispatcher:
    """Drives the store, reconciler and view generator for one command."""

    def __init__(
        self,
        config: ToolConfig,
        *,
        store: FeatureStore | None = None,
        identity: IdentityProvider | None = None,
        view: ViewGenerator | None = None,
    ) -> None:
        self.config = config
        self.store = store or FeatureStore(config)
        self.identity = identity or CommandIdentityProvider()
        self.view = view or ViewGenerator(config)

    async def dispatch(self, options: FlagCommand) -> OperationResult | None:
        """Run the highest-priority command in ``options``.

        Returns:
            The command's result, or None if no command was requested.
        """
        if options.add:
            return await self.add(options)
        if options.remove:
            return await self.remove(options)
        if options.set:
            return await self.set(options)
        return None

    async def add(self, options: FlagCommand) -> OperationResult:
        """Add the flag everywhere, updating it where it already exists.

        Environments whose mask says "no change" get the flag disabled.
        """
        user = await self.identity()
        mask = options.effective_mask()
        documents: dict[str, FeatureDocument] = {}

        for env in self.config.environments:
            document = self.store.load_or_create(env)
            enabled = environment_flag(mask, self.config.environment_index(env))
            if enabled is None:
                enabled = False
            add_or_update(document, options.flag, user, enabled)
            documents[env] = document

        result = OperationResult(command="add", flag=options.flag)
        await self._save_all(documents, result)
        return result

    async def remove(self, options: FlagCommand) -> OperationResult:
        """Remove the flag from every existing features file.

        Environments without a file are skipped and no file is created.
        """
        result = OperationResult(command="remove", flag=options.flag)
        documents: dict[str, FeatureDocument] = {}

        for env in self.config.environments:
            document = self.store.load(env)
            if document is None:
                logger.debug(f"No features file for {env}, skipping")
                result.outcomes[env] = Outcome.SKIPPED
                continue
            documents[env] = remove(document, options.flag)

        await self._save_all(documents, result)
        return result

    async def set(self, options: FlagCommand) -> OperationResult:
        """Change the state of an existing flag.

        Every environment's file must exist and contain the flag; this is
        checked for all environments before anything is written.

        Raises:
            FeaturesFileMissingError: If an environment has no features file.
            FlagNotFoundError: If an environment's file lacks the flag.
        """
        user = await self.identity()
        mask = options.effective_mask()

        loaded: dict[str, FeatureDocument] = {}
        for env in self.config.environments:
            document = self.store.load(env)
            if document is None:
                raise FeaturesFileMissingError(
                    f"Features file {self.store.path_for(env)} is empty, use -a to add flag"
                )
            if document.find(options.flag) is None:
                raise FlagNotFoundError(
                    f"Can only SET flag status of existing flag, use -a to add flag ({options.flag} not in {env})"
                )
            loaded[env] = document

        result = OperationResult(command="set", flag=options.flag)
        documents: dict[str, FeatureDocument] = {}
        for env, document in loaded.items():
            enabled = environment_flag(mask, self.config.environment_index(env))
            if enabled is None:
                result.outcomes[env] = Outcome.SKIPPED
                continue
            documents[env] = add_or_update(document, options.flag, user, enabled)

        await self._save_all(documents, result)
        return result

    def list_flags(self) -> dict[str, dict[str, bool | None]]:
        """Return each flag's state per environment.

        Flags are ordered by first appearance across environments; the state
        is None where an environment does not have the flag.
        """
        table: dict[str, dict[str, bool | None]] = {}
        for env in self.config.environments:
            document = self.store.load(env)
            if document is None:
                continue
            for record in document.features:
                row = table.setdefault(record.name, dict.fromkeys(self.config.environments))
                row[env] = record.enabled
        return table

    async def generate_view(self) -> bool:
        """Re-render the view from the view environment's current file."""
        document = self.store.load_or_create(self.config.view_environment)
        return await self.view.generate(document)

    async def _save_all(self, documents: dict[str, FeatureDocument], result: OperationResult) -> None:
        envs = list(documents)
        saves = [self._save(env, documents[env], result) for env in envs]
        outcomes = await asyncio.gather(*saves)
        for env, outcome in zip(envs, outcomes):
            result.outcomes[env] = outcome

    async def _save(self, env: str, document: FeatureDocument, result: OperationResult) -> Outcome:
        if not await self.store.save(document, env):
            return Outcome.FAILED
        if env == self.config.view_environment:
            result.view_generated = await self.view.generate(document)
        return Outcome.SAVED

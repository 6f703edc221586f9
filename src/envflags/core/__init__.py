"""Core logic for the features tool."""

from envflags.core.config import (
    DEFAULT_ENVIRONMENTS,
    DEFAULT_MASK,
    MASK_LENGTH,
    ToolConfig,
)
from envflags.core.dispatcher import (
    Dispatcher,
    FlagCommand,
    OperationResult,
    Outcome,
)
from envflags.core.errors import (
    FeatureFlagError,
    FeaturesFileCorruptError,
    FeaturesFileMissingError,
    FlagNotFoundError,
    IdentityError,
    InvalidMaskError,
    ViewRenderError,
)
from envflags.core.identity import (
    CommandIdentityProvider,
    IdentityProvider,
    StaticIdentityProvider,
    clean_identity,
)
from envflags.core.models import FeatureDocument, FeatureRecord, utc_timestamp
from envflags.core.reconcile import add_or_update, environment_flag, remove, validate_mask
from envflags.core.store import FeatureStore
from envflags.core.view import ViewGenerator

__all__ = [
    # config
    "DEFAULT_ENVIRONMENTS",
    "DEFAULT_MASK",
    "MASK_LENGTH",
    "ToolConfig",
    # dispatcher
    "Dispatcher",
    "FlagCommand",
    "OperationResult",
    "Outcome",
    # errors
    "FeatureFlagError",
    "FeaturesFileCorruptError",
    "FeaturesFileMissingError",
    "FlagNotFoundError",
    "IdentityError",
    "InvalidMaskError",
    "ViewRenderError",
    # identity
    "CommandIdentityProvider",
    "IdentityProvider",
    "StaticIdentityProvider",
    "clean_identity",
    # models
    "FeatureDocument",
    "FeatureRecord",
    "utc_timestamp",
    # reconcile
    "add_or_update",
    "environment_flag",
    "remove",
    "validate_mask",
    # store
    "FeatureStore",
    # view
    "ViewGenerator",
]

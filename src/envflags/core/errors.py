"""Exceptions raised by the feature flag tool."""

from __future__ import annotations


class FeatureFlagError(Exception):
    """Base exception for feature flag errors."""


class InvalidMaskError(FeatureFlagError):
    """Raised when an environment mask is too short."""


class FeaturesFileCorruptError(FeatureFlagError):
    """Raised when a features file does not contain valid JSON."""


class FeaturesFileMissingError(FeatureFlagError):
    """Raised when a set targets an environment without a features file."""


class FlagNotFoundError(FeatureFlagError):
    """Raised when a set targets a flag that was never added."""


class IdentityError(FeatureFlagError):
    """Raised when the current user identity cannot be resolved."""


class ViewRenderError(FeatureFlagError):
    """Raised when the generated view cannot be rendered."""

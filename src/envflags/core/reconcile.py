"""Flag reconciliation — decode the environment mask and merge a desired
state into a features document.

Mask characters, one per environment in configured order::

    T  set the flag to true
    F  set the flag to false
    *  leave the flag unchanged (any other character behaves the same)
"""

from __future__ import annotations

from envflags.core.config import DEFAULT_MASK, MASK_LENGTH
from envflags.core.errors import InvalidMaskError
from envflags.core.models import FeatureDocument, FeatureRecord


def validate_mask(mask: str) -> str:
    """Return ``mask`` unchanged if it is long enough.

    Raises:
        InvalidMaskError: If the mask has fewer than ``MASK_LENGTH`` characters.
    """
    if len(mask) < MASK_LENGTH:
        raise InvalidMaskError(f'invalid mask "{mask}": specify {MASK_LENGTH} environments')
    return mask


def environment_flag(mask: str | None, index: int) -> bool | None:
    """Decode the desired state for the environment at ``index``.

    Args:
        mask: Environment mask, or None for the default ``"T***"``.
        index: Environment position (dev=0, test=1, prod=2).

    Returns:
        True or False for ``T``/``F`` (any case), None for no change.
    """
    char = (mask or DEFAULT_MASK)[index].upper()
    if char == "T":
        return True
    if char == "F":
        return False
    return None


def add_or_update(
    document: FeatureDocument,
    name: str,
    identity: str,
    enabled: bool | None,
    now: str | None = None,
) -> FeatureDocument:
    """Merge a desired state into ``document`` in place.

    An existing record keeps its creation audit fields and gets new update
    fields. A missing record is appended. ``enabled=None`` is a no-op.

    Returns:
        The same document, for chaining.
    """
    if enabled is None:
        return document

    existing = document.find(name)
    if existing is not None:
        existing.update(enabled, identity, now)
    else:
        document.features.append(FeatureRecord.create(name, enabled, identity, now))

    return document


def remove(document: FeatureDocument, name: str) -> FeatureDocument:
    """Delete every record called ``name`` from ``document`` in place."""
    document.features = [record for record in document.features if record.name != name]
    return document

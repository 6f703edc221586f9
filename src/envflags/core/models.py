"""Feature records and the per-environment document that holds them.

The JSON layout is::

    {
      "Features": [
        {
          "name": "Checkout",
          "createdOn": "2024-05-01T09:30:00.000Z",
          "createdBy": "Jane Doe",
          "updatedOn": null,
          "updatedBy": null,
          "enabled": true
        }
      ]
    }

Keys this module does not know about are carried through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

FEATURES_KEY = "Features"

_RECORD_KEYS = ("name", "createdOn", "createdBy", "updatedOn", "updatedBy", "enabled")


def utc_timestamp(now: datetime | None = None) -> str:
    """Format a moment as an ISO-8601 UTC timestamp with milliseconds."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class FeatureRecord:
    """A single flag within one environment.

    Attributes:
        name: Flag name, unique within its document.
        enabled: Current state.
        created_on: Timestamp of the first write, never changed afterwards.
        created_by: Identity of the creator, never changed afterwards.
        updated_on: Timestamp of the last modification, None until modified.
        updated_by: Identity of the last modifier, None until modified.
        extra: Unrecognised JSON keys, preserved on save.
    """

    name: str
    enabled: bool
    created_on: str
    created_by: str
    updated_on: str | None = None
    updated_by: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, name: str, enabled: bool, identity: str, now: str | None = None) -> FeatureRecord:
        """Create a fresh, never-modified record."""
        return cls(
            name=name,
            enabled=enabled,
            created_on=now or utc_timestamp(),
            created_by=identity,
        )

    def update(self, enabled: bool, identity: str, now: str | None = None) -> None:
        """Set the state and stamp the update audit fields."""
        self.enabled = enabled
        self.updated_by = identity
        self.updated_on = now or utc_timestamp()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeatureRecord:
        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise TypeError(f"Flag {data.get('name')!r} has non-boolean enabled value {enabled!r}")
        return cls(
            name=data["name"],
            enabled=enabled,
            created_on=data.get("createdOn"),
            created_by=data.get("createdBy"),
            updated_on=data.get("updatedOn"),
            updated_by=data.get("updatedBy"),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "createdOn": self.created_on,
            "createdBy": self.created_by,
            "updatedOn": self.updated_on,
            "updatedBy": self.updated_by,
            "enabled": self.enabled,
        }
        data.update(self.extra)
        return data


@dataclass
class FeatureDocument:
    """Ordered list of feature records for one environment.

    Attributes:
        features: Records in file order.
        extra: Top-level JSON keys other than ``Features``, preserved on save.
    """

    features: list[FeatureRecord] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def find(self, name: str) -> FeatureRecord | None:
        """Return the record called ``name``, or None."""
        for record in self.features:
            if record.name == name:
                return record
        return None

    def names(self) -> list[str]:
        """Return flag names in file order."""
        return [record.name for record in self.features]

    def __len__(self) -> int:
        return len(self.features)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeatureDocument:
        if not isinstance(data, dict):
            raise TypeError("Features document must be a JSON object")
        return cls(
            features=[FeatureRecord.from_dict(item) for item in data.get(FEATURES_KEY, [])],
            extra={k: v for k, v in data.items() if k != FEATURES_KEY},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {FEATURES_KEY: [record.to_dict() for record in self.features]}
        data.update(self.extra)
        return data

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Data models for configuration items and change events."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ConfigItem(BaseModel):
    """One key/value pair as returned by the authority."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: StrictStr = Field(..., description="Configuration key")
    value: StrictStr = Field(..., description="Configuration value")


class VersionInfo(BaseModel):
    """Active version reported by the version check endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version_id: int = Field(..., alias="versionId")
    version_name: str = Field(default="", alias="versionName")
    check_sum: str | None = Field(default=None, alias="checkSum")


class ChangeType(str, Enum):
    """Kind of a single key change."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass(frozen=True)
class Change:
    """A single key change.

    Attributes:
        type: Add, modify or delete
        key: Configuration key
        old_value: Previous value (None for ADD)
        new_value: New value (None for DELETE)
    """

    type: ChangeType
    key: str
    old_value: str | None = None
    new_value: str | None = None

    @classmethod
    def add(cls, key: str, new_value: str) -> "Change":
        return cls(ChangeType.ADD, key, new_value=new_value)

    @classmethod
    def modify(cls, key: str, old_value: str, new_value: str) -> "Change":
        return cls(ChangeType.MODIFY, key, old_value=old_value, new_value=new_value)

    @classmethod
    def delete(cls, key: str, old_value: str) -> "Change":
        return cls(ChangeType.DELETE, key, old_value=old_value)

    def to_dict(self) -> dict[str, str | None]:
        return {
            "type": self.type.value,
            "key": self.key,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass
class ChangeEvent:
    """Batch of changes produced by one sync cycle, keyed by config key."""

    changes: dict[str, Change] = field(default_factory=dict)
    version_id: int | None = None

    def added(self) -> list[Change]:
        return self._of_type(ChangeType.ADD)

    def modified(self) -> list[Change]:
        return self._of_type(ChangeType.MODIFY)

    def deleted(self) -> list[Change]:
        return self._of_type(ChangeType.DELETE)

    def _of_type(self, change_type: ChangeType) -> list[Change]:
        return [c for c in self.changes.values() if c.type is change_type]

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes.values())

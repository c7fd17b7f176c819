from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

REQUIRED_FIELDS = ("id", "version")

# Fields sent to the registry, in wire order.
SYNC_FIELDS = ("id", "name", "description", "icon", "version", "authors", "keywords")


class PublishMode(str, Enum):
    versioned = "versioned"
    unversioned = "unversioned"


class AdapterDescriptor(BaseModel):
    """Contents of an adapter's ``src/adapter.json``.

    Unknown keys are kept so the file can be written back without loss.
    """

    model_config = ConfigDict(extra="allow")

    id: str = ""
    version: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    authors: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("id", "version", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        # JSON numbers are used as-is in object keys
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("authors", "keywords", mode="before")
    @classmethod
    def _null_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def problems(self, versioned: bool = True) -> List[str]:
        """Human-readable reasons this descriptor cannot be published.

        The version only has to be semver when it becomes part of the
        object keys.
        """
        found = [
            f"'{name}' is missing or empty"
            for name in REQUIRED_FIELDS
            if not getattr(self, name).strip()
        ]
        if found:
            return found
        if "/" in self.id or self.id in (".", "..") or self.id != self.id.strip():
            found.append(f"'id' {self.id!r} is not a valid object key segment")
        if versioned and not SEMVER_RE.match(self.version):
            found.append(f"'version' {self.version!r} is not a semantic version")
        return found

    def sync_payload(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        return {name: data[name] for name in SYNC_FIELDS}


__all__ = [
    "AdapterDescriptor",
    "PublishMode",
    "REQUIRED_FIELDS",
    "SEMVER_RE",
    "SYNC_FIELDS",
]

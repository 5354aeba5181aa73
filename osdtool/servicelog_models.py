"""Service log message templates and server replies."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{[^{}]*\}")
_FRACTION = re.compile(r"\.(\d+)")


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"cannot unmarshal {type(data).__name__} into {what}")
    return data


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _boolean(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; None stays None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = value
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as err:
        raise ValueError(f"invalid timestamp {value!r}") from err
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no time zone offset")
    return parsed


_MESSAGE_TEXT_FIELDS = (
    "severity",
    "service_name",
    "cluster_uuid",
    "cluster_id",
    "summary",
    "description",
    "event_stream_id",
    "subscription_id",
)


@dataclass
class Message:
    """A service log message template."""

    severity: str = ""
    service_name: str = ""
    cluster_uuid: str = ""
    cluster_id: str = ""
    summary: str = ""
    description: str = ""
    internal_only: bool = False
    event_stream_id: str = ""
    subscription_id: str = ""

    def replace_with_flag(self, variable: str, value: str) -> None:
        """Replace every occurrence of a placeholder in all text fields."""
        for name in _MESSAGE_TEXT_FIELDS:
            setattr(self, name, getattr(self, name).replace(variable, value))

    def search_flag(self, placeholder: str) -> bool:
        """Report whether any text field contains the placeholder."""
        return any(placeholder in getattr(self, name) for name in _MESSAGE_TEXT_FIELDS)

    def find_leftovers(self) -> list[str]:
        """Return the ${...} placeholders still present in the template."""
        text = (
            self.severity
            + self.service_name
            + self.cluster_uuid
            + self.summary
            + self.description
            + self.event_stream_id
        )
        return _PLACEHOLDER.findall(text)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, omitting empty optional identifiers."""
        data: dict[str, Any] = {
            "severity": self.severity,
            "service_name": self.service_name,
        }
        if self.cluster_uuid:
            data["cluster_uuid"] = self.cluster_uuid
        if self.cluster_id:
            data["cluster_id"] = self.cluster_id
        data["summary"] = self.summary
        data["description"] = self.description
        data["internal_only"] = self.internal_only
        data["event_stream_id"] = self.event_stream_id
        if self.subscription_id:
            data["subscription_id"] = self.subscription_id
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Message:
        """Build a message from decoded JSON; unknown keys are ignored."""
        data = _require_mapping(data, "Message")
        values: dict[str, Any] = {name: _string(data, name) for name in _MESSAGE_TEXT_FIELDS}
        values["internal_only"] = _boolean(data, "internal_only")
        return cls(**values)


@dataclass
class GoodReply:
    """The server's reply to a successfully posted service log."""

    id: str = ""
    kind: str = ""
    href: str = ""
    timestamp: datetime | None = None
    severity: str = ""
    service_name: str = ""
    cluster_uuid: str = ""
    summary: str = ""
    description: str = ""
    event_stream_id: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Any) -> GoodReply:
        data = _require_mapping(data, "GoodReply")
        values: dict[str, Any] = {
            f.name: _string(data, f.name)
            for f in fields(cls)
            if f.name not in ("timestamp", "created_at")
        }
        values["timestamp"] = _parse_timestamp(data.get("timestamp"))
        values["created_at"] = _parse_timestamp(data.get("created_at"))
        return cls(**values)


@dataclass
class ServiceLogShort:
    """A condensed view of a service log entry."""

    summary: str = ""
    description: str = ""
    created_at: datetime | None = None
    severity: str = ""


@dataclass
class ClusterListGoodReply:
    """A page of service logs for a cluster."""

    kind: str = ""
    page: int = 0
    size: int = 0
    total: int = 0
    items: list[GoodReply] = field(default_factory=list)


@dataclass
class ServiceLogShortList:
    """A page of condensed service log entries."""

    kind: str = ""
    page: int = 0
    size: int = 0
    total: int = 0
    items: list[ServiceLogShort] = field(default_factory=list)


@dataclass
class BadReply:
    """The server's reply when posting a service log failed."""

    id: str = ""
    kind: str = ""
    href: str = ""
    code: str = ""
    reason: str = ""
    operation_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> BadReply:
        data = _require_mapping(data, "BadReply")
        return cls(**{f.name: _string(data, f.name) for f in fields(cls)})


@dataclass
class ClustersFile:
    """A list of cluster identifiers to post a service log to."""

    clusters: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ClustersFile:
        data = _require_mapping(data, "ClustersFile")
        clusters = data.get("clusters")
        if clusters is None:
            return cls()
        if not isinstance(clusters, list) or not all(isinstance(c, str) for c in clusters):
            raise ValueError("field 'clusters' must be a list of strings")
        return cls(clusters=list(clusters))
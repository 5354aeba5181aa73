"""Limited support reason templates and server replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from osdtool.servicelog_models import _parse_timestamp, _require_mapping, _string


@dataclass
class SupportGoodReply:
    """The server's reply to a created limited support reason."""

    id: str = ""
    kind: str = ""
    href: str = ""
    details: str = ""
    detection_type: str = ""
    summary: str = ""
    creation_timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SupportGoodReply:
        data = _require_mapping(data, "SupportGoodReply")
        return cls(
            id=_string(data, "id"),
            kind=_string(data, "kind"),
            href=_string(data, "href"),
            details=_string(data, "details"),
            detection_type=_string(data, "detection_type"),
            summary=_string(data, "summary"),
            creation_timestamp=_parse_timestamp(data.get("creation_timestamp")),
        )


@dataclass
class SupportBadReply:
    """The server's error reply; details holds each detail's description."""

    id: str = ""
    kind: str = ""
    href: str = ""
    code: str = ""
    reason: str = ""
    details: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SupportBadReply:
        data = _require_mapping(data, "SupportBadReply")
        raw_details = data.get("details")
        if raw_details is None:
            raw_details = []
        if not isinstance(raw_details, list):
            raise ValueError("field 'details' must be a list")
        details = [
            _string(_require_mapping(item, "detail"), "description") for item in raw_details
        ]
        return cls(
            id=_string(data, "id"),
            kind=_string(data, "kind"),
            href=_string(data, "href"),
            code=_string(data, "code"),
            reason=_string(data, "reason"),
            details=details,
        )


@dataclass
class LimitedSupport:
    """A limited support reason template."""

    summary: str = ""
    details: str = ""
    detection_type: str = ""
    id: str = ""
    template_id: str = ""

    def replace_with_flag(self, variable: str, value: str) -> None:
        """Replace a placeholder in the summary and details."""
        self.summary = self.summary.replace(variable, value)
        self.details = self.details.replace(variable, value)

    def search_flag(self, placeholder: str) -> bool:
        """Report whether the summary or details contain the placeholder."""
        return placeholder in self.summary or placeholder in self.details

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, omitting empty identifiers."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        if self.template_id:
            data["template_id"] = self.template_id
        data["summary"] = self.summary
        data["details"] = self.details
        data["detection_type"] = self.detection_type
        return data
"""Validation of the server's replies to service log posts."""

from __future__ import annotations

import json
from typing import Any

from osdtool.servicelog_models import BadReply, GoodReply, Message


class ResponseValidationError(ValueError):
    """The server's reply was malformed or did not match what was sent."""


_CHECKS = (
    ("severity", "message sent, but wrong severity information was passed"),
    ("service_name", "message sent, but wrong service_name information was passed"),
    ("cluster_uuid", "message sent, but to different cluster"),
    ("summary", "message sent, but wrong summary information was passed"),
    ("description", "message sent, but wrong description information was passed"),
)


def _decode(body: bytes | str) -> Any:
    try:
        return json.loads(body)
    except (ValueError, TypeError) as err:
        raise ResponseValidationError("server returned invalid JSON") from err


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def validate_good_response(body: bytes | str, cluster_message: Message) -> GoodReply:
    """Parse a success reply and check it echoes the message that was sent."""
    data = _decode(body)
    try:
        reply = GoodReply.from_dict(data)
    except ValueError as err:
        raise ResponseValidationError(
            f"cannot not parse the JSON template.\nError: {_quote(str(err))}"
        ) from err

    for name, problem in _CHECKS:
        wanted = getattr(cluster_message, name)
        got = getattr(reply, name)
        if got != wanted:
            raise ResponseValidationError(
                f"{problem} (wanted {_quote(wanted)}, got {_quote(got)})"
            )
    return reply


def validate_bad_response(body: bytes | str) -> BadReply:
    """Parse an error reply from the server."""
    data = _decode(body)
    try:
        return BadReply.from_dict(data)
    except ValueError as err:
        raise ResponseValidationError(
            f"cannot parse the error JSON message {_quote(str(err))}"
        ) from err
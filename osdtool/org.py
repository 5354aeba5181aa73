"""Organization records and search queries."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from osdtool.servicelog_models import _require_mapping, _string

ORGANIZATIONS_API_PATH = "/api/accounts_mgmt/v1/organizations"
ACCOUNTS_API_PATH = "/api/accounts_mgmt/v1/accounts"
CURRENT_ACCOUNT_API_PATH = "/api/accounts_mgmt/v1/current_account"


class SearchType(enum.IntEnum):
    """How organizations are being searched for."""

    NONE = 0
    USER = 1
    EBS = 2


@dataclass
class Organization:
    """An organization as described by the accounts service."""

    id: str = ""
    external_id: str = ""
    name: str = ""
    ebs_account_id: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Organization:
        data = _require_mapping(data, "Organization")
        return cls(
            id=_string(data, "id"),
            external_id=_string(data, "external_id"),
            name=_string(data, "name"),
            ebs_account_id=_string(data, "ebs_account_id"),
            created=_string(data, "created_at"),
            updated=_string(data, "updated_at"),
        )


def check_org_id(args: Sequence[str]) -> str:
    """Return the single organization id in the arguments."""
    if not args:
        raise ValueError("organization id was not provided. please provide a organization id")
    if len(args) != 1:
        raise ValueError(f"too many arguments. expected 1 got {len(args)}")
    return args[0]


def get_search_type(user: str, ebs_account_id: str) -> SearchType:
    """Search by user name if given, else by EBS account id."""
    if user:
        return SearchType.USER
    if ebs_account_id:
        return SearchType.EBS
    return SearchType.NONE


def get_search_query(user: str, ebs_account_id: str, part_match: bool = False) -> str:
    """Return the search parameter for the chosen kind of search."""
    search_type = get_search_type(user, ebs_account_id)
    if search_type is SearchType.USER:
        prepend = "%" if part_match else ""
        return f"search=username like '{prepend}{user}%'"
    if search_type is SearchType.EBS:
        return f"search=ebs_account_id='{ebs_account_id}'"
    return ""
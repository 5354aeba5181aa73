"""Users of an organization and their roles."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass
class UserModel:
    """A user of an organization with the roles it holds."""

    user_name: str = ""
    user_id: str = ""
    roles: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the user."""
        return {"user-name": self.user_name, "user-id": self.user_id, "roles": list(self.roles)}


def check_roles(roles: Iterable[str], role_args: Iterable[str]) -> bool:
    """Report whether any of the roles is among the wanted ones."""
    wanted = set(role_args)
    return any(role in wanted for role in roles)


def print_array(items: Sequence[str]) -> str:
    """Join the items in reverse order, each followed by a space."""
    return "".join(f"{item} " for item in reversed(items))


def filter_users(
    account_roles: Mapping[UserModel, Sequence[str]] | Iterable[tuple[UserModel, Sequence[str]]],
    role_args: Sequence[str] = (),
) -> list[UserModel]:
    """Attach roles to each user, keeping only users with a wanted role if any are given."""
    pairs = account_roles.items() if isinstance(account_roles, Mapping) else account_roles
    users = []
    for user, roles in pairs:
        if role_args and not check_roles(roles, role_args):
            continue
        users.append(dataclasses.replace(user, roles=list(roles)))
    return users
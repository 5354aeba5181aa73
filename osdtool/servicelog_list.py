"""Argument handling and search queries for listing a cluster's service logs."""

from __future__ import annotations

import logging
from collections.abc import Sequence

log = logging.getLogger(__name__)

TARGET_API_PATH = "/api/service_logs/v1/cluster_logs"
_MISSING_CLUSTER = (
    "cluster-identifier was not provided. please provide a cluster id, UUID, or name"
)


def complete(args: Sequence[str]) -> str:
    """Return the cluster identifier from the command arguments.

    Raises ValueError when none is given; extra arguments are logged and
    ignored.
    """
    if not args:
        raise ValueError(_MISSING_CLUSTER)
    if len(args) != 1:
        log.info("Too many arguments. Expected 1 got %d", len(args))
    return args[0]


def build_list_search(
    cluster_id: str,
    external_id: str,
    all_messages: bool = False,
    internal_messages: bool = False,
) -> str:
    """Return the search parameter selecting a cluster's service logs.

    The external id is preferred over the internal one. Unless all_messages
    is set, only SRE manual action messages are selected.
    """
    if external_id:
        query = f"search=cluster_uuid = '{external_id}'"
    else:
        query = f"search=cluster_id = '{cluster_id}'"
    if not all_messages:
        query += " and service_name = 'SREManualAction'"
    if internal_messages:
        query += " and internal_only = 'true'"
    return query
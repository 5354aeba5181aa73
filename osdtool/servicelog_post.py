"""Preparation and bookkeeping for posting service logs to clusters."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from osdtool.files import file_exists, folder_exists
from osdtool.network import curl_this, is_online, is_valid_url
from osdtool.servicelog_models import ClustersFile, Message
from osdtool.servicelog_validate import (
    ResponseValidationError,
    validate_bad_response,
    validate_good_response,
)

log = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{[^{}]*\}")
_PARAM_SYNTAX = "Wrong syntax of '-p' flag. Please use it like this: '-p FOO=BAR'"
_INTERRUPTED = "cannot send message due to program interruption"

_INTERNAL_TEMPLATE = b"""
{
    "severity": "Info",
    "service_name": "SREManualAction",
    "summary": "INTERNAL ONLY, DO NOT SHARE WITH CUSTOMER",
    "description": "${MESSAGE}",
    "internal_only": true
}
"""


class PostError(Exception):
    """Posting a service log cannot go ahead."""


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _format_table(rows: Iterable[list[str]], min_width: int = 20, padding: int = 3) -> str:
    rows = [list(row) for row in rows]
    columns = max((len(row) for row in rows), default=0)
    widths = [
        max([min_width] + [len(row[i]) + padding for row in rows if i < len(row) - 1])
        for i in range(columns)
    ]
    lines = []
    for row in rows:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])]
        cells.extend(row[-1:])
        lines.append("".join(cells))
    return "\n".join(lines) + "\n"


@dataclass
class PostCmdOptions:
    """Options and state for posting one service log to many clusters."""

    message: Message = field(default_factory=Message)
    clusters: ClustersFile = field(default_factory=ClustersFile)
    template: str = ""
    template_params: list[str] = field(default_factory=list)
    filter_files: list[str] = field(default_factory=list)
    filters_from_file: str = ""
    filter_params: list[str] = field(default_factory=list)
    is_dry_run: bool = False
    skip_prompts: bool = False
    clusters_file: str = ""
    internal_only: bool = False
    cluster_id: str = ""
    user_parameters: list[tuple[str, str]] = field(default_factory=list)
    successful_clusters: dict[str, str] = field(default_factory=dict)
    failed_clusters: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Require at least one way of selecting clusters."""
        if not self.cluster_id and not self.filter_params and not self.clusters_file:
            raise PostError("no cluster identifier has been found")

    def parse_user_parameters(self) -> list[tuple[str, str]]:
        """Parse each '-p NAME=VALUE' into a (${NAME}, VALUE) pair."""
        parsed = []
        for param in self.template_params:
            if "=" not in param:
                raise PostError(_PARAM_SYNTAX)
            name, value = param.split("=", 1)
            if not name or not value:
                raise PostError(_PARAM_SYNTAX)
            parsed.append((f"${{{name}}}", value))
        self.user_parameters = parsed
        return parsed

    def access_file(self, file_path: str) -> bytes:
        """Return the contents of a local file or a URL."""
        if is_valid_url(file_path):
            try:
                is_online(file_path)
            except ConnectionError as err:
                raise PostError(f"host {_quote(file_path)} is not accessible") from err
            return curl_this(file_path)

        path = os.path.normpath(file_path) if file_path else file_path
        if file_exists(path):
            try:
                with open(path, "rb") as handle:
                    return handle.read()
            except OSError as err:
                raise PostError(f"cannot read the file.\nError: {_quote(str(err))}") from err
        if folder_exists(path):
            raise PostError(f"the provided path {_quote(path)} is a directory, not a file")
        raise PostError(f"cannot read the file {_quote(path)}")

    def parse_clusters_file(self, json_file: bytes | str) -> ClustersFile:
        """Load the list of clusters from JSON of the form {"clusters": [...]}."""
        try:
            self.clusters = ClustersFile.from_dict(json.loads(json_file))
        except ValueError as err:
            raise PostError(f"cannot parse clusters file: {err}") from err
        return self.clusters

    def parse_template(self, json_file: bytes | str) -> Message:
        """Load the message template from JSON."""
        try:
            self.message = Message.from_dict(json.loads(json_file))
        except ValueError as err:
            raise PostError(
                f"Cannot not parse the JSON template.\nError: {_quote(str(err))}"
            ) from err
        return self.message

    def read_template(self) -> Message:
        """Load the template given with '-t', or the fixed internal one."""
        if self.internal_only:
            return self.parse_template(_INTERNAL_TEMPLATE)
        if not self.template:
            raise PostError("Template file is not provided. Use '-t' to fix this.")
        return self.parse_template(self.access_file(self.template))

    def read_filter_file(self) -> str:
        """Combine the queries from every '-f' file with logical AND."""
        for filter_file in self.filter_files:
            contents = self.access_file(filter_file).decode("utf-8").strip()
            if not self.filters_from_file:
                self.filters_from_file = f"({contents})"
            else:
                self.filters_from_file = f"{self.filters_from_file} and ({contents})"
        return self.filters_from_file

    def find_leftovers(self, s: str) -> list[str]:
        """Return the ${...} placeholders found in the string."""
        return _PLACEHOLDER.findall(s)

    def check_leftovers(self, excludes: Iterable[str]) -> None:
        """Fail if any placeholder outside the excludes is still unset."""
        excluded = set(excludes)
        unused = self.message.find_leftovers() + self.find_leftovers(self.filters_from_file)
        missing = [name for name in unused if name not in excluded]
        for name in missing:
            bare = name.replace("${", "").replace("}", "")
            log.error(
                "The one of the template files is using '%s' parameter, but '--param' "
                "flag is not set for this one. Use '-p %s=\"FOOBAR\"' to fix this.",
                name,
                bare,
            )
        if len(missing) == 1:
            raise PostError("Please define this missing parameter properly.")
        if len(missing) > 1:
            raise PostError(f"Please define all {len(missing)} missing parameters properly.")

    def replace_flags(self, flag_name: str, flag_value: str) -> None:
        """Substitute a parameter in the template and the filter queries."""
        if not flag_value:
            raise PostError(
                f"The selected template is using '{flag_name}' parameter, but "
                f"'{flag_name}' flag was not set. Use '-p {flag_name}=\"FOOBAR\"' to fix this."
            )
        found = False
        if self.message.search_flag(flag_name):
            found = True
            self.message.replace_with_flag(flag_name, flag_value)
        if flag_name in self.filters_from_file:
            found = True
            self.filters_from_file = self.filters_from_file.replace(flag_name, flag_value)
        if not found:
            raise PostError(
                f"The selected template is not using '{flag_name}' parameter, but "
                f"'--param' flag was set. Do not use '-p {flag_name}={flag_value}' to fix this."
            )

    def apply_parameters(self) -> Message:
        """Read parameters, filters and template, then fill in every placeholder.

        ${CLUSTER_UUID} is left in place, to be filled for each cluster.
        """
        self.parse_user_parameters()
        self.read_filter_file()
        self.read_template()
        for name, value in self.user_parameters:
            self.replace_flags(name, value)
        self.check_leftovers(["${CLUSTER_UUID}"])
        return self.message

    def check(self, status: int, body: bytes | str, cluster_message: Message) -> bool:
        """Record the outcome of one post; return whether it succeeded."""
        uuid = cluster_message.cluster_uuid
        if status < 400:
            try:
                validate_good_response(body, cluster_message)
            except ResponseValidationError as err:
                self.failed_clusters[uuid] = str(err)
                return False
            self.successful_clusters[uuid] = f"Message has been successfully sent to {uuid}"
            return True
        try:
            reply = validate_bad_response(body)
        except ResponseValidationError as err:
            self.failed_clusters[uuid] = str(err)
        else:
            self.failed_clusters[uuid] = reply.reason
        return False

    def build_post_body(
        self, cluster_uuid: str, cluster_id: str, subscription_id: str | None = None
    ) -> bytes:
        """Address the message to a cluster and return the JSON request body."""
        self.message.cluster_uuid = cluster_uuid
        self.message.cluster_id = cluster_id
        self.message.internal_only = self.internal_only
        if subscription_id is not None:
            self.message.subscription_id = subscription_id
        return json.dumps(self.message.to_dict()).encode("utf-8")

    def post_summary(self) -> str:
        """Return the report of successful and failed clusters."""
        parts = [
            f"Success: {len(self.successful_clusters)}, "
            f"Failed: {len(self.failed_clusters)}\n\n"
        ]
        for title, outcome in (
            ("Successful clusters:", self.successful_clusters),
            ("Failed clusters:", self.failed_clusters),
        ):
            if outcome:
                rows: list[list[str]] = [["ID", "Status"]]
                rows.extend([cid, status] for cid, status in outcome.items())
                parts.append(title + "\n" + _format_table(rows) + "\n")
        return "".join(parts)

    def clean_up(self, cluster_ids: Iterable[str]) -> str:
        """Mark clusters not yet messaged as failed and return the report."""
        for cid in cluster_ids:
            if cid not in self.successful_clusters:
                self.failed_clusters[cid] = _INTERRUPTED
        return self.post_summary()


def _as_mapping(data: Mapping[str, object]) -> dict[str, object]:
    return dict(data)
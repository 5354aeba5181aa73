"""Extract and compare the STS credential request policies of releases."""

from __future__ import annotations

import subprocess

import semver

_RELEASE_IMAGE = "quay.io/openshift-release-dev/ocp-release"
_OUTPUT_PREFIX = "/tmp/crs-"


class UsageError(ValueError):
    """The command was called with invalid arguments."""


def validate_release_version(version: str) -> semver.Version:
    """Parse a release version, raising UsageError if it is not semantic."""
    try:
        return semver.Version.parse(version)
    except (ValueError, TypeError) as err:
        raise UsageError(
            f"Release version must satisfy the semantic version format: {err}"
        ) from err


def _output_dir(version: str) -> str:
    return f"{_OUTPUT_PREFIX}{version}"


def extract_policy(version: str) -> str:
    """Extract the release's AWS credential requests; return the directory."""
    target = _output_dir(version)
    command = (
        f"oc adm release extract {_RELEASE_IMAGE}:{version}-x86_64 "
        f"--credentials-requests --cloud=aws --to={target}"
    )
    try:
        subprocess.run(["bash", "-c", command], check=True, stdout=subprocess.PIPE)
    except (subprocess.CalledProcessError, OSError) as err:
        print(err, end="")
        raise
    return target


def policy(version: str) -> str:
    """Save the STS policy files of a release and report where they are."""
    validate_release_version(version)
    target = extract_policy(version)
    message = f"OCP STS policy files have been saved in {target} directory"
    print(message)
    return message


def policy_diff(old_version: str, new_version: str) -> str:
    """Extract the policies of two releases and return their diff."""
    for version in (old_version, new_version):
        validate_release_version(version)
    for version in (old_version, new_version):
        extract_policy(version)
    command = f"diff {_output_dir(old_version)} {_output_dir(new_version)}"
    result = subprocess.run(["bash", "-c", command], check=False, stdout=subprocess.PIPE)
    output = (result.stdout or b"").decode("utf-8", errors="replace")
    print(output)
    return output
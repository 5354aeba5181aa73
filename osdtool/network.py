"""Small HTTP helpers for reaching templates and checking connectivity."""

from __future__ import annotations

import urllib.error
import urllib.parse
import urllib.request

_ONLINE_TIMEOUT = 2.0


def is_online(url: str) -> int:
    """Check that the URL answers with a 2xx status, following redirects.

    Returns the final status code; raises ConnectionError otherwise.
    """
    opener = urllib.request.build_opener()
    try:
        with opener.open(url, timeout=_ONLINE_TIMEOUT) as response:
            status = response.status
    except urllib.error.HTTPError as err:
        status = err.code
        err.close()
    except (urllib.error.URLError, OSError, ValueError) as err:
        raise ConnectionError(str(err)) from err

    if 200 <= status < 300:
        return status
    raise ConnectionError(
        f'timeout or unknown HTTP error, while trying to access "{url}"'
    )


def is_valid_url(to_test: str) -> bool:
    """Report whether the string is an absolute URL with a scheme and a host."""
    if not to_test or any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in to_test):
        return False
    try:
        parts = urllib.parse.urlsplit(to_test)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def curl_this(webpage: str) -> bytes:
    """Fetch the page body; a response other than 200 yields empty bytes."""
    opener = urllib.request.build_opener()
    try:
        with opener.open(webpage) as response:
            if response.status == 200:
                return response.read()
            return b""
    except urllib.error.HTTPError as err:
        err.close()
        return b""
    except (urllib.error.URLError, OSError, ValueError) as err:
        raise ConnectionError(str(err)) from err
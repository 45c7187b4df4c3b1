"""
Shared GET-JSON helper for the remote clients.

Maps every transport outcome onto a Result so no requests exception
escapes a client:

    Timeout               -> <PREFIX>_TIMEOUT
    connection / other    -> <PREFIX>_NETWORK_ERROR
    non-2xx status        -> <PREFIX>_ERROR (status_code set)
    body is not JSON      -> <PREFIX>_INVALID_RESPONSE
"""

import logging
from typing import Any, Optional

import requests

from ..result import Result, network_error

logger = logging.getLogger(__name__)

USER_AGENT = "potaplan/1.0"

RETRY_SUGGESTIONS = [
    "Check your network connection",
    "Try again later",
]


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    })
    return session


def get_json(
    session: requests.Session,
    url: str,
    timeout: float,
    code_prefix: str,
    service: str,
    params: Optional[dict] = None,
) -> Result[Any]:
    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.Timeout:
        logger.warning(f"{service} request timed out after {timeout:g}s: {url}")
        return network_error(
            f"{service} request timed out after {timeout:g} seconds",
            f"{code_prefix}_TIMEOUT",
            ["Check your network connection", "The API may be slow to respond", "Try again later"],
        )
    except requests.exceptions.RequestException as e:
        logger.warning(f"{service} request failed: {e}")
        return network_error(
            f"Network error: unable to reach {service}. {e}",
            f"{code_prefix}_NETWORK_ERROR",
            ["Check your network connection", "Verify you have internet access", "Try again later"],
        )

    if not resp.ok:
        logger.warning(f"{service} returned HTTP {resp.status_code} for {url}")
        return network_error(
            f"{service} returned status {resp.status_code}: {resp.reason}",
            f"{code_prefix}_ERROR",
            [f"The {service} may be experiencing issues", "Try again later"],
            status_code=resp.status_code,
        )

    try:
        return Result.ok(resp.json())
    except ValueError as e:
        logger.warning(f"{service} returned a non-JSON body: {e}")
        return network_error(
            f"{service} returned an invalid response: {e}",
            f"{code_prefix}_INVALID_RESPONSE",
            RETRY_SUGGESTIONS,
        )

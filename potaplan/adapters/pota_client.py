"""
POTA API client for park data.

Endpoints used:
    GET  /parks                  full park list (large; cache locally)
    GET  /park/{REF}             single park, 404 when unknown
    GET  /parks/entity/{id}      parks for one DXCC entity
    HEAD /health                 reachability probe

No retries: callers decide whether to try again.
"""

import logging
from typing import Optional

import requests

from .http import build_session, get_json
from ..result import Result, network_error

logger = logging.getLogger(__name__)

BASE_URL = "https://api.pota.app"


def _invalid_response(message: str) -> Result:
    logger.warning(f"Unexpected POTA API response: {message}")
    return network_error(
        f"Invalid response from POTA API: {message}",
        "POTA_API_INVALID_RESPONSE",
        ["The POTA API may be changing or degraded; try again later"],
    )


class PotaClient:
    """Timeout-bounded client for api.pota.app."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30,
        health_timeout: float = 5,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.session = session or build_session()

    def _get(self, path: str) -> Result:
        return get_json(
            self.session, f"{self.base_url}{path}", self.timeout,
            code_prefix="POTA_API", service="POTA API",
        )

    def fetch_all_parks(self) -> Result[list[dict]]:
        """Fetch every park. Thousands of records; sync stores them in one batch."""
        result = self._get("/parks")
        if not result.success:
            return result
        parks = result.data or []
        if not isinstance(parks, list) or not all(isinstance(p, dict) for p in parks):
            return _invalid_response("Expected a list of park records from /parks")
        logger.info(f"Fetched {len(parks)} parks from POTA API")
        return Result.ok(parks)

    def fetch_park(self, reference: str) -> Result[Optional[dict]]:
        """Fetch one park by reference. An unknown reference is success with None."""
        ref = reference.strip().upper()
        result = self._get(f"/park/{ref}")
        if not result.success:
            if result.error.status_code == 404:
                return Result.ok(None)
            return result
        # The API answers unknown references with an empty body on some paths
        if not result.data:
            return Result.ok(None)
        if not isinstance(result.data, dict):
            return _invalid_response(f"Expected a park record from /park/{ref}")
        return Result.ok(result.data)

    def fetch_parks_by_entity(self, entity_id: int) -> Result[list[dict]]:
        result = self._get(f"/parks/entity/{entity_id}")
        if result.success and not isinstance(result.data or [], list):
            return _invalid_response(f"Expected a list of parks from /parks/entity/{entity_id}")
        return result

    def check_api_health(self) -> Result[bool]:
        """HEAD the health endpoint. Always succeeds; data says whether it answered 2xx."""
        try:
            resp = self.session.head(
                f"{self.base_url}/health", timeout=self.health_timeout,
            )
            return Result.ok(resp.ok)
        except requests.exceptions.RequestException as e:
            logger.debug(f"POTA API health check failed: {e}")
            return Result.ok(False)

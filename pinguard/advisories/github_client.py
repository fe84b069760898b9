"""
GitHub advisory lookup: searches the github/advisory-database issue tracker
for open issues labelled with an action's 'owner/repo'.

This is a label-based search heuristic, not a dedicated vulnerability feed,
so an empty result means "nothing found", not "proven safe". Only the first
page of results is read.

Rate limiting is handled by waiting for the server-supplied Retry-After
(60s if absent) and starting the same lookup over. By default there is no
retry ceiling.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
ADVISORY_REPO = "github/advisory-database"
USER_AGENT = "pinguard-advisory-client/0.1"
DEFAULT_RETRY_AFTER = 60
DEFAULT_TIMEOUT = 30
PER_PAGE = 100


class AdvisoryLookupError(Exception):
    """Raised when an advisory lookup cannot give an answer."""


@dataclass
class AdvisoryRecord:
    """One advisory issue returned by the search."""
    id: str
    title: str
    state: str
    severity: Optional[str] = None
    labels: list[str] = field(default_factory=list)
    number: Optional[int] = None


def _decode_advisory(item: dict[str, Any]) -> AdvisoryRecord:
    return AdvisoryRecord(
        id=str(item["id"]),
        title=item["title"],
        state=item["state"],
        severity=item.get("severity"),
        labels=[label["name"] for label in item.get("labels", [])],
        number=item.get("number"),
    )


def _retry_after_seconds(response: requests.Response) -> int:
    """Read Retry-After as whole seconds, falling back to the default."""
    value = response.headers.get("Retry-After")
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER


def _is_rate_limited(response: requests.Response) -> bool:
    if response.status_code == 429:
        return True
    # GitHub signals an exhausted primary rate limit with 403
    return (
        response.status_code == 403
        and response.headers.get("X-RateLimit-Remaining") == "0"
    )


class AdvisoryClient:
    """
    Client for the advisory search.

    Args:
        session: requests.Session to use; one is created if omitted.
        token: GitHub token for authenticated (higher rate limit) requests.
        api_url: Base URL of the GitHub REST API.
        timeout: Per-request timeout in seconds.
        sleep: Called with the number of seconds to wait when rate limited.
        max_rate_limit_retries: Give up after this many rate-limited
            attempts. None (the default) retries forever.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
        api_url: str = GITHUB_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        max_rate_limit_retries: Optional[int] = None,
    ):
        self.session = session or self._create_session(token)
        self.search_url = f"{api_url.rstrip('/')}/search/issues"
        self.timeout = timeout
        self.sleep = sleep
        self.max_rate_limit_retries = max_rate_limit_retries

    @staticmethod
    def _create_session(token: Optional[str]) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github.v3+json",
        })
        if token:
            session.headers["Authorization"] = f"token {token}"
        return session

    def lookup_advisories(self, owner: str, repo: str) -> list[AdvisoryRecord]:
        """
        Find open advisories for the action 'owner/repo'.

        Returns:
            The advisories found, possibly an empty list.

        Raises:
            AdvisoryLookupError: On a transport error, an unexpected status,
                an undecodable body, or when the optional retry ceiling
                is exceeded.
        """
        identity = f"{owner}/{repo}"
        params = {
            "q": f"repo:{ADVISORY_REPO} is:issue is:open label:{identity}",
            "per_page": PER_PAGE,
        }

        rate_limited = 0
        while True:
            t0 = time.monotonic()
            try:
                response = self.session.get(self.search_url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise AdvisoryLookupError(f"HTTP request failed for {identity}: {e}") from e
            elapsed_ms = (time.monotonic() - t0) * 1000
            logger.debug("Advisory search for %s: HTTP %d in %.0fms", identity, response.status_code, elapsed_ms)

            if not _is_rate_limited(response):
                break

            rate_limited += 1
            if self.max_rate_limit_retries is not None and rate_limited > self.max_rate_limit_retries:
                raise AdvisoryLookupError(
                    f"Still rate limited after {self.max_rate_limit_retries} retries for {identity}"
                )
            wait = _retry_after_seconds(response)
            logger.warning("Rate limited. Retrying %s after %d seconds...", identity, wait)
            self.sleep(wait)

        if response.status_code != 200:
            raise AdvisoryLookupError(
                f"Unexpected HTTP status {response.status_code} for {identity}"
            )

        try:
            items = response.json()["items"]
            advisories = [_decode_advisory(item) for item in items]
        except (ValueError, KeyError, TypeError) as e:
            raise AdvisoryLookupError(f"Could not decode advisories for {identity}: {e}") from e

        logger.info("Advisory search for %s: %d result(s)", identity, len(advisories))
        return advisories

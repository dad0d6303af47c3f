"""HTTP access to the archive site."""

from __future__ import annotations

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from aozoraindex.config import DEFAULT_USER_AGENT
from aozoraindex.errors import FetchError

LOGGER = logging.getLogger(__name__)


def make_session(*, retries: int = 2, user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """Build a session that retries transient failures on idempotent GETs."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        backoff_factor=0.5,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = user_agent
    return session


class Fetcher:
    """Stateless GET client with a mandatory per-request timeout."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = 30.0,
        retries: int = 2,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        if timeout is None or timeout <= 0:
            raise ValueError("A positive fetch timeout is required")
        self.session = session if session is not None else make_session(
            retries=retries, user_agent=user_agent
        )
        self.timeout = timeout

    def get(self, url: str) -> bytes:
        """Return the full body of ``url`` or raise :class:`FetchError`."""
        LOGGER.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(url, cause=exc) from exc

        try:
            if response.status_code // 100 != 2:
                raise FetchError(url, status=response.status_code)
            return response.content
        finally:
            response.close()

    def close(self) -> None:
        self.session.close()

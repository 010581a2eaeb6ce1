"""Client for published (subscribed) task calendars."""

from __future__ import annotations

import logging

import httpx

from .errors import InvalidFileError
from .models import TaskList
from .parser import decode

logger = logging.getLogger(__name__)

CALENDAR_MEDIA_TYPE = "text/calendar"


def normalize_feed_url(url: str) -> str:
    """Rewrite ``webcal://`` subscription links to ``https://``."""
    if url.lower().startswith("webcal://"):
        return "https://" + url[len("webcal://") :]
    return url


class CalendarFeedClient:
    """Fetches a calendar over HTTP and decodes it into a TaskList."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = normalize_feed_url(url)
        self._client = httpx.Client(
            headers={"Accept": f"{CALENDAR_MEDIA_TYPE}, text/plain;q=0.5"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def fetch_text(self) -> str:
        """Download the calendar body.

        Raises:
            InvalidFileError: on a bad URL, a transport failure or a non-2xx
                response.
        """
        try:
            resp = self._client.get(self.url)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise InvalidFileError(f"cannot fetch {self.url}: {exc}") from exc
        content_type = resp.headers.get("content-type", "")
        if CALENDAR_MEDIA_TYPE not in content_type:
            logger.debug("Feed %s served %r, decoding anyway", self.url, content_type)
        return resp.text

    def fetch(self) -> TaskList:
        task_list = decode(self.fetch_text())
        logger.info("Fetched %d tasks from %s", len(task_list.tasks), self.url)
        return task_list

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> CalendarFeedClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

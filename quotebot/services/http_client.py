from __future__ import annotations

"""Blocking HTTP GET helper shared by every price source.

Uses stdlib urllib; callers run inside worker threads so blocking is fine.
There are no retries: a failed upstream call is reported back to the user,
who re-issues the command.
"""
import logging
import urllib.error
import urllib.request
from typing import Optional

logger = logging.getLogger("quotebot.http")

USER_AGENT = "quotebot/0.1 (+https://t.me/coincap_prices_bot)"


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def fetch(url: str, *, timeout: float = 10.0) -> bytes:
    """GET ``url`` and return the raw body; any non-2xx or transport failure raises HttpError."""
    request = urllib.request.Request(
        url, headers={"User-Agent": USER_AGENT, "Accept": "*/*"}
    )
    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            if resp.status >= 300:
                raise HttpError(f"HTTP {resp.status} for {url}", status=resp.status)
            return resp.read()
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {url}", status=e.code) from e
    except (urllib.error.URLError, TimeoutError, ConnectionError) as e:
        raise HttpError(f"Failed to fetch {url}: {e}") from e

"""Shared HTTP helpers used by the repository fetchers.

Encapsulates common request/timeout/retry handling so fetchers avoid
duplicating try/except blocks. Transport failures never exit the process;
they are reported as a zero status code and left to the caller to interpret.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _sleep_backoff(attempt: int) -> None:
    """Sleep before the next retry using exponential backoff."""
    time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout and retries with DEBUG traces.

    Server errors (5xx) and transport exceptions are retried up to
    Constants.HTTP_RETRY_MAX times. Client errors return immediately.

    Returns:
        Tuple of (status_code, headers_dict, text); status_code is 0 when
        every attempt failed at the transport level.
    """
    safe_target = safe_url(url)
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )
                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    **kwargs
                )
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target
                        )
                    )
                if response.status_code >= 500 and attempt + 1 < Constants.HTTP_RETRY_MAX:
                    _sleep_backoff(attempt)
                    continue
                return response.status_code, dict(response.headers), response.text
            except requests.Timeout:
                last_exception = "timeout"
            except requests.RequestException as exc:  # includes ConnectionError
                last_exception = str(exc)
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request exception",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="GET",
                    outcome=last_exception,
                    attempt=attempt + 1,
                    target=safe_target
                )
            )
        if attempt + 1 < Constants.HTTP_RETRY_MAX:
            _sleep_backoff(attempt)

    logger.warning("GET %s failed after %s attempts: %s", safe_target, Constants.HTTP_RETRY_MAX, last_exception)
    return 0, {}, ""


def download_file(url: str, dest_path: str, *, headers: Optional[Dict[str, str]] = None) -> int:
    """Stream ``url`` into ``dest_path``.

    The file is only left on disk for a 200 response; a partial file from an
    interrupted transfer is removed.

    Returns:
        int: HTTP status code, or 0 on transport failure.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        try:
            with requests.get(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=headers,
                stream=True,
            ) as response:
                if response.status_code != 200:
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Download skipped",
                            extra=extra_context(
                                event="http_response",
                                component="http_client",
                                action="download",
                                outcome="not_found",
                                status_code=response.status_code,
                                target=safe_target
                            )
                        )
                    return response.status_code
                with open(dest_path, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
        except requests.RequestException as exc:
            logger.debug("Download of %s failed: %s", safe_target, exc)
            if os.path.exists(dest_path):
                os.remove(dest_path)
            return 0

    if is_debug_enabled(logger):
        logger.debug(
            "Download complete",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="download",
                outcome="success",
                status_code=200,
                duration_ms=t.duration_ms(),
                target=safe_target
            )
        )
    return 200

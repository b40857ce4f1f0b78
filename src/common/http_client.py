"""Shared HTTP helpers used by registry clients.

Callers only deal with ``(status_code, headers, payload)`` tuples and never
with raw ``requests`` exceptions. Transport errors, 429 and 5xx responses are
retried with a linear backoff.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def new_session() -> requests.Session:
    """Session carrying the default headers for registry requests."""
    session = requests.Session()
    session.headers.update({"User-Agent": Constants.USER_AGENT})
    return session


def _trace(message: str, **fields: Any) -> None:
    if is_debug_enabled(logger):
        logger.debug(message, extra=extra_context(component="http_client", action="GET", **fields))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """GET ``url`` with a timeout, retrying transient failures.

    Returns:
        Tuple of (status_code, headers_dict, body_text); status_code is 0 when
        every attempt failed at the transport level.
    """
    getter = session.get if session is not None else requests.get
    target = safe_url(url)
    last_error = "no attempt made"

    for attempt in range(1, Constants.HTTP_RETRY_MAX + 1):
        if attempt > 1:
            time.sleep(Constants.HTTP_RETRY_DELAY * (attempt - 1))
        _trace("HTTP request", event="http_request", target=target, attempt=attempt)
        with Timer() as t:
            try:
                response = getter(url, timeout=Constants.REQUEST_TIMEOUT, headers=headers, **kwargs)
            except requests.Timeout:
                last_error = "timeout"
                _trace("HTTP timeout", event="http_exception", outcome="timeout",
                       target=target, attempt=attempt)
                continue
            except requests.RequestException as exc:  # includes ConnectionError
                last_error = str(exc)
                _trace("HTTP request exception", event="http_exception",
                       outcome="request_exception", target=target, attempt=attempt)
                continue

        _trace("HTTP response", event="http_response", status_code=response.status_code,
               duration_ms=t.duration_ms(), target=target, attempt=attempt)
        if response.status_code in _RETRYABLE_STATUS and attempt < Constants.HTTP_RETRY_MAX:
            last_error = f"status {response.status_code}"
            continue
        return response.status_code, dict(response.headers), response.text

    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_error}"


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """GET ``url`` and decode a JSON body.

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none); the payload
        is None for non-200 responses and undecodable bodies.
    """
    status_code, response_headers, text = robust_get(url, headers=headers, session=session, **kwargs)
    if status_code != 200 or not text:
        return status_code, response_headers, None
    try:
        return status_code, response_headers, json.loads(text)
    except json.JSONDecodeError:
        _trace("JSON decode error", event="parse", outcome="json_decode_error",
               status_code=status_code, target=safe_url(url))
        return status_code, response_headers, None

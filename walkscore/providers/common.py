"""Shared HTTP plumbing for Maps web-service providers."""

from typing import Any, Dict, Iterable, Optional

import requests

from ..errors import ProviderError
from ..logger import get_logger
from ..retry import (
    RetryError,
    TransientApiStatus,
    exponential_backoff,
    should_retry_api_status,
    should_retry_http_status,
)

DEFAULT_TIMEOUT = 15
OK_STATUSES = ("OK",)


class RetryableHTTPError(requests.exceptions.HTTPError):
    """HTTP error whose status code is worth retrying (408, 429, 5xx)."""
    pass


RETRYABLE_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    RetryableHTTPError,
    TransientApiStatus,
)


@exponential_backoff(max_retries=3, base_delay=1.0, exceptions=RETRYABLE_EXCEPTIONS)
def _get_with_retry(url: str, params: Dict[str, Any], timeout: float):
    """GET a Maps endpoint, retrying transient transport and quota errors."""
    resp = requests.get(url, params=params, timeout=timeout)
    if should_retry_http_status(resp.status_code):
        raise RetryableHTTPError(f"{resp.status_code} from {url}", response=resp)
    resp.raise_for_status()
    data = resp.json()
    status = data.get("status") if isinstance(data, dict) else None
    if status and should_retry_api_status(status):
        raise TransientApiStatus(status)
    return data


def fetch_json(
    url: str,
    params: Dict[str, Any],
    service: str,
    timeout: float = DEFAULT_TIMEOUT,
    allowed_statuses: Iterable[str] = OK_STATUSES,
    **context,
) -> Dict[str, Any]:
    """Fetch a Maps endpoint with standardized error handling and logging.

    Args:
        url: Endpoint URL
        params: Query parameters (the API key included)
        service: Service name for logging (e.g. 'geocode', 'distancematrix')
        timeout: Per-request timeout in seconds
        allowed_statuses: Maps ``status`` values that count as success
        **context: origin/category/batch_index carried into ProviderError

    Returns:
        Decoded JSON body

    Raises:
        ProviderError: On HTTP errors, timeouts, exhausted retries, a body
            that is not JSON, or a Maps status outside ``allowed_statuses``
    """
    logger = get_logger()
    logger.record_provider_call()
    safe_context = {k: v for k, v in context.items() if v is not None}

    try:
        data = _get_with_retry(url, params, timeout)
    except RetryError as e:
        cause = e.__cause__
        status = getattr(cause, "status", None)
        if isinstance(cause, requests.exceptions.HTTPError) and cause.response is not None:
            status = str(cause.response.status_code)
        logger.error(f"{service} request failed after retries", error=str(cause), **safe_context)
        raise ProviderError(f"{service} request failed after retries: {cause}", status=status, **context) from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.error(f"{service} request failed", status=status, **safe_context)
        raise ProviderError(f"{service} request failed ({status})", status=str(status), **context) from e
    except requests.exceptions.JSONDecodeError as e:
        logger.error(f"{service} returned a non-JSON body", **safe_context)
        raise ProviderError(f"{service} returned a malformed response", **context) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"{service} request error", error=str(e), **safe_context)
        raise ProviderError(f"{service} request error: {e}", **context) from e
    except ValueError as e:
        # resp.json() on a non-JSON body
        logger.error(f"{service} returned a non-JSON body", **safe_context)
        raise ProviderError(f"{service} returned a malformed response", **context) from e

    if not isinstance(data, dict):
        raise ProviderError(f"{service} returned a malformed response", **context)

    status = data.get("status")
    if status not in tuple(allowed_statuses):
        message = data.get("error_message") or "unexpected status"
        logger.error(f"{service} returned {status}", error_message=message, **safe_context)
        raise ProviderError(f"{service} failed: {message}", status=status, **context)

    return data


def require(data: Dict[str, Any], key: str, service: str, **context) -> Any:
    """Fetch a required key from a response body or raise ProviderError."""
    value: Optional[Any] = data.get(key)
    if value is None:
        raise ProviderError(f"{service} response missing '{key}'", **context)
    return value

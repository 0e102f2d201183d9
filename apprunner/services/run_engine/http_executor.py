"""
HTTP dispatch for composed app requests.
"""

import json
import logging
import re
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from apprunner.models.contracts import ExecutableHttpRequest, KeyValuePair
from apprunner.models.enums import HttpMethod
from apprunner.services.run_engine.outcomes import DispatchOutcome

logger = logging.getLogger(__name__)

BODYLESS_METHODS = {"GET", "DELETE", "HEAD"}
INTEGER_PATTERN = re.compile(r"^[-+]?\d+$")
FLOAT_PATTERN = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")


def build_url(base_url: str, url_parameters: list[KeyValuePair]) -> str:
    """Append URL-encoded query parameters, keeping any existing query string."""
    if not url_parameters:
        return base_url
    query = urlencode([(p.key, p.value) for p in url_parameters], quote_via=quote)
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{query}"


def json_body_value(value: str) -> Any:
    """Give a body value its natural JSON type (int, float, bool, null, else string)."""
    if INTEGER_PATTERN.match(value):
        return int(value)
    if FLOAT_PATTERN.match(value):
        return float(value)
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if value == "null":
        return None
    return value


def build_body(
    http_method: HttpMethod, body: list[KeyValuePair], use_json_body: bool
) -> tuple[str | None, str | None]:
    """
    Encode the request body.

    Returns:
        Tuple of (content, content_type); both None when no body is sent
    """
    if http_method.value in BODYLESS_METHODS or not body:
        return None, None
    if use_json_body:
        payload = {p.key: json_body_value(p.value) for p in body}
        return json.dumps(payload), "application/json"
    content = urlencode([(p.key, p.value) for p in body], quote_via=quote)
    return content, "application/x-www-form-urlencoded"


class HttpExecutor:
    """
    Sends one ExecutableHttpRequest.

    2xx responses are successes; any other status, timeout or transport
    error is a failure. Nothing is retried.
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def execute(self, request: ExecutableHttpRequest) -> DispatchOutcome:
        url = request.base_url
        try:
            url = build_url(request.base_url, request.url_parameters)
            content, content_type = build_body(
                request.http_method, request.body, request.use_json_body
            )

            headers = [(h.key, h.value) for h in request.headers]
            if content_type and not any(k.lower() == "content-type" for k, _ in headers):
                headers.append(("Content-Type", content_type))

            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.request(
                    request.http_method.value,
                    url,
                    headers=headers,
                    content=content,
                )
        except httpx.TimeoutException as e:
            logger.warning(f"HTTP request to {request.base_url} timed out: {e}")
            return DispatchOutcome.failed(
                f"HTTP request timed out after {self.timeout_seconds}s: {e}"
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.warning(f"Invalid URL {url}: {e}")
            return DispatchOutcome.failed(f"Invalid URL format: {e}")
        except httpx.HTTPError as e:
            logger.warning(f"HTTP request to {request.base_url} failed: {e}")
            return DispatchOutcome.failed(f"HTTP request failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error during HTTP request to {request.base_url}")
            return DispatchOutcome.failed(f"Unexpected error during HTTP request: {e}")

        body = response.text
        if response.is_success:
            return DispatchOutcome.ok(body)

        logger.warning(
            f"HTTP request to {request.base_url} returned status {response.status_code}"
        )
        return DispatchOutcome.failed(
            f"HTTP request failed with status {response.status_code}: {body}",
            response=body,
        )

"""A small JSON-over-HTTP client used by the API providers."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, replace
from typing import Any

import httpx

from .records import (
    ApiError,
    NotFoundError,
    SerializeError,
    UnauthorizedError,
)

DEFAULT_TIMEOUT = 30.0

Headers = tuple[tuple[str, str], ...]


def _valid_header_value(value: str) -> bool:
    return all(ch == "\t" or (ord(ch) >= 32 and ord(ch) != 127) for ch in value)


def _append_header(headers: Headers, name: str, value: str) -> Headers:
    if not _valid_header_value(value):
        return headers
    return (*headers, (name, value))


@dataclass(frozen=True)
class HttpClientBuilder:
    """Shared settings from which individual requests are built."""

    timeout: float = DEFAULT_TIMEOUT
    headers: Headers = (("Content-Type", "application/json"),)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(tuple(h) for h in self.headers))

    def build(self, method: str, url: str) -> HttpClient:
        return HttpClient(
            method=method.upper(), url=url, headers=self.headers, timeout=self.timeout
        )

    def get(self, url: str) -> HttpClient:
        return self.build("GET", url)

    def post(self, url: str) -> HttpClient:
        return self.build("POST", url)

    def put(self, url: str) -> HttpClient:
        return self.build("PUT", url)

    def delete(self, url: str) -> HttpClient:
        return self.build("DELETE", url)

    def patch(self, url: str) -> HttpClient:
        return self.build("PATCH", url)

    def with_header(self, name: str, value: str) -> HttpClientBuilder:
        """Return a builder with the header appended; invalid values are ignored."""
        return replace(self, headers=_append_header(self.headers, name, value))

    def with_timeout(self, timeout: float | None) -> HttpClientBuilder:
        """Return a builder with the timeout set, unless ``timeout`` is None."""
        return self if timeout is None else replace(self, timeout=timeout)


@dataclass(frozen=True)
class HttpClient:
    """A single prepared request."""

    method: str
    url: str
    headers: Headers = ()
    timeout: float = DEFAULT_TIMEOUT
    body: str | None = None

    def with_header(self, name: str, value: str) -> HttpClient:
        return replace(self, headers=_append_header(self.headers, name, value))

    def with_body(self, body: Any) -> HttpClient:
        """Return a request carrying ``body`` encoded as JSON."""
        try:
            encoded = json.dumps(body, separators=(",", ":"))
        except (TypeError, ValueError) as err:
            raise SerializeError(f"Failed to serialize request: {err}") from err
        return replace(self, body=encoded)

    def with_raw_body(self, body: str) -> HttpClient:
        return replace(self, body=body)

    async def _perform(self) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(
                    self.method,
                    self.url,
                    headers=list(self.headers),
                    content=self.body,
                )
        except httpx.HTTPError as err:
            raise ApiError(f"Failed to send request to {self.url}: {err}") from err

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        status = response.status_code
        if status == 400:
            raise ApiError(f"BadRequest {response.text}")
        if status == 401:
            raise UnauthorizedError()
        if status == 404:
            raise NotFoundError()
        raise ApiError(
            f"Invalid HTTP response code {status}: {response.reason_phrase}"
        )

    @staticmethod
    def _decode(text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as err:
            raise SerializeError(f"Failed to deserialize response: {err}") from err

    async def send(self) -> Any:
        """Send the request and decode the JSON response."""
        return self._decode(await self.send_raw())

    async def send_raw(self) -> str:
        """Send the request and return the response body as text."""
        response = await self._perform()
        if response.status_code == 204:
            return ""
        if 200 <= response.status_code < 300:
            return response.text
        self._raise_for_error(response)
        raise AssertionError("unreachable")

    async def send_with_retry(self, max_retries: int) -> Any:
        """Send the request, waiting and retrying on rate limiting."""
        attempts = 0
        while True:
            response = await self._perform()
            status = response.status_code
            if status == 204:
                return {}
            if 200 <= status < 300:
                return self._decode(response.text)
            if status == 429 and attempts < max_retries:
                retry_after = response.headers.get("retry-after")
                if retry_after is not None:
                    if not (retry_after.isascii() and retry_after.isprintable()):
                        retry_after = "0"
                    if retry_after.isdigit():
                        await asyncio.sleep(int(retry_after))
                        attempts += 1
                        continue
                raise ApiError("Rate limit exceeded")
            self._raise_for_error(response)
"""HTTP client abstraction for hosting platform APIs.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Canned responses for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from gitflow import __version__
from gitflow.core.result import Err, Ok, Result

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A 2xx response."""

    status: int
    body: bytes = b""

    def json(self) -> object:
        """Decode the body as JSON (None for an empty body).

        Raises:
            ValueError: If the body is not valid UTF-8 JSON.
        """
        if not self.body.strip():
            return None
        return json.loads(self.body.decode("utf-8"))


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Reason phrase or transport error
        body: Response body text, if any (platform error payloads live here)
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json_body: object = None,
        timeout: float | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request; non-2xx responses are returned as HttpError."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"gitflow/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json_body: object = None,
        timeout: float | None = None,
    ) -> Result[HttpResponse, HttpError]:
        full_url = url
        if params:
            full_url = f"{url}?{urllib.parse.urlencode(params)}"

        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        all_headers.update(headers or {})

        data: bytes | None = None
        if json_body is not None:
            data = json.dumps(json_body).encode("utf-8")
            all_headers["Content-Type"] = "application/json"

        req = urllib.request.Request(full_url, data=data, headers=all_headers, method=method)
        try:
            with urllib.request.urlopen(
                req,
                timeout=timeout if timeout is not None else self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            try:
                body = e.read().decode("utf-8", errors="replace")
            except OSError:
                body = ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request recorded by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, str]
    json_body: object
    timeout: float | None


def _empty_calls() -> list[HttpCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url) with the query string excluded;
    unregistered requests answer 404.

    Usage:
        http = MockHttpClient()
        http.set_json("GET", "https://api.github.com/user", {"login": "octo"})
        http.set_error("GET", "https://api.github.com/repos/o/r", 404)
    """

    calls: list[HttpCall] = field(default_factory=_empty_calls)
    _responses: dict[tuple[str, str], HttpResponse | HttpError] = field(default_factory=dict)

    def set_json(self, method: str, url: str, payload: object, status: int = 200) -> None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self._responses[(method.upper(), url)] = HttpResponse(status=status, body=body)

    def set_response(self, method: str, url: str, response: HttpResponse | HttpError) -> None:
        self._responses[(method.upper(), url)] = response

    def set_error(self, method: str, url: str, status: int, message: str = "") -> None:
        body = json.dumps({"message": message}) if message else ""
        self._responses[(method.upper(), url)] = HttpError(
            url=url, status=status, message=message or f"status {status}", body=body
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json_body: object = None,
        timeout: float | None = None,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(
            HttpCall(
                method=method.upper(),
                url=url,
                headers=dict(headers or {}),
                params=dict(params or {}),
                json_body=json_body,
                timeout=timeout,
            )
        )

        response = self._responses.get((method.upper(), url))
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls_to(self, method: str, url: str) -> list[HttpCall]:
        return [c for c in self.calls if c.method == method.upper() and c.url == url]

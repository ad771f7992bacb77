"""
HTTP transport for Crowdin API v2.

This module wraps an ``httpx.AsyncClient`` bound to one base URL. It
handles:

- Bearer authorization that can be swapped or cleared at runtime
- JSON and octet-stream request bodies
- Streaming downloads to a file
- Retry with exponential backoff for idempotent requests
- Error message extraction from Crowdin's error bodies
- 401 handling through an ``on_unauthorized`` hook
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import httpx

from .exceptions import CrowdinAPIError, CrowdinAuthenticationError, CrowdinResponseError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Not authorized, please sign in again."
DEFAULT_ERROR_MESSAGE = "JSON request error"


def _dig(data: Any, *path: Union[str, int]) -> Any:
    """Walk nested objects/arrays, returning None at the first missing step."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data


def _validation_error_message(body: Any) -> Optional[str]:
    """``{"errors": [{"error": {"errors": [{"message": ...}]}}]}``"""
    message = _dig(body, "errors", 0, "error", "errors", 0, "message")
    return message if isinstance(message, str) else None


def _plain_error_message(body: Any) -> Optional[str]:
    """``{"error": {"message": ...}}``"""
    message = _dig(body, "error", "message")
    return message if isinstance(message, str) else None


# Tried in order; the first one returning text wins.
ERROR_MESSAGE_STRATEGIES = (
    _validation_error_message,
    _plain_error_message,
)


def extract_error_message(body: Any) -> str:
    """
    Get a human-readable message from a Crowdin error body.

    Args:
        body: Decoded JSON error body

    Returns:
        Message from the first matching error shape, or a generic message
    """
    for strategy in ERROR_MESSAGE_STRATEGIES:
        message = strategy(body)
        if message:
            return message
    return DEFAULT_ERROR_MESSAGE


def _sanitize_error_message(error: Exception) -> str:
    """Describe a network error without leaking request headers."""
    error_str = str(error)
    if "Authorization" in error_str or "Bearer" in error_str:
        return "Network error occurred"
    return f"Network error: {error_str or type(error).__name__}"


class CrowdinTransport:
    """
    Asynchronous HTTP client for one Crowdin host.

    Example:
        transport = CrowdinTransport("https://crowdin.com/api/v2")
        transport.rebind("https://acme.crowdin.com/api/v2", token)
        data = await transport.get("projects", params={"limit": 500})
        await transport.aclose()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        on_unauthorized: Optional[Callable[[], None]] = None,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ):
        """
        Initialize transport.

        Args:
            base_url: Base URL request paths are resolved against
            timeout: Request timeout in seconds
            on_unauthorized: Called on every 401 response, before the error is raised
            max_retries: Maximum retries for GET requests on network or 5xx errors
            retry_delay: Base delay between retries in seconds (exponential backoff)
        """
        self.on_unauthorized = on_unauthorized
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        """Current base URL (without trailing slash)."""
        return str(self._client.base_url).rstrip("/")

    @property
    def is_authorized(self) -> bool:
        """True if requests carry an Authorization header."""
        return "Authorization" in self._client.headers

    def rebind(self, base_url: str, token: str) -> None:
        """
        Point the transport at a new base URL with a bearer token attached.

        Args:
            base_url: New base URL
            token: Bearer token
        """
        self._client.base_url = base_url
        self._client.headers["Authorization"] = f"Bearer {token}"

    def clear_authorization(self) -> None:
        """Stop sending the Authorization header."""
        self._client.headers.pop("Authorization", None)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "CrowdinTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        Raise the matching CrowdinAPIError for an unsuccessful response.

        Raises:
            CrowdinAuthenticationError: On 401 (after on_unauthorized ran)
            CrowdinAPIError: On any other non-2xx status
        """
        if response.is_success:
            return

        if response.status_code == 401:
            logger.error(f"Authentication failed (401): {response.request.url}")
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise CrowdinAuthenticationError(UNAUTHORIZED_MESSAGE, status_code=401)

        try:
            message = extract_error_message(response.json())
        except ValueError:
            message = f"HTTP {response.status_code} {response.reason_phrase}".strip()

        logger.error(f"API error ({response.status_code}): {message}")
        raise CrowdinAPIError(message, status_code=response.status_code)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Make HTTP request to the bound host.

        GET requests are retried with exponential backoff on network
        errors and 5xx responses; other methods are sent once.

        Args:
            method: HTTP method (GET, POST)
            endpoint: Path relative to the base URL, or an absolute URL
            params: Query parameters
            json_data: JSON request body
            content: Raw request body
            headers: Extra request headers

        Returns:
            Successful response

        Raises:
            CrowdinAuthenticationError: If authentication fails (401)
            CrowdinAPIError: For other API or network errors
        """
        retries = self.max_retries if method == "GET" else 0
        attempt = 0

        while True:
            logger.debug(f"{method} {endpoint}")
            try:
                response = await self._client.request(
                    method,
                    endpoint,
                    params=params,
                    json=json_data,
                    content=content,
                    headers=headers,
                )
            except httpx.RequestError as e:
                if attempt < retries:
                    delay = self.retry_delay * (2**attempt)
                    attempt += 1
                    logger.warning(
                        f"{_sanitize_error_message(e)}. Retrying in {delay}s "
                        f"(attempt {attempt}/{retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"{method} {endpoint} failed: {_sanitize_error_message(e)}")
                raise CrowdinAPIError(_sanitize_error_message(e)) from e

            if response.status_code >= 500 and attempt < retries:
                delay = self.retry_delay * (2**attempt)
                attempt += 1
                logger.warning(
                    f"Server error ({response.status_code}). Retrying in {delay}s "
                    f"(attempt {attempt}/{retries})"
                )
                await asyncio.sleep(delay)
                continue

            self._raise_for_status(response)
            logger.debug(f"Response: {response.status_code}")
            return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise CrowdinResponseError(
                f"Invalid JSON response from {response.request.url.path}",
                status_code=response.status_code,
            ) from e

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make GET request.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            JSON response as dictionary
        """
        return self._json(await self._request("GET", endpoint, params=params))

    async def post(
        self,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Make POST request with a JSON body.

        Args:
            endpoint: API endpoint path
            json_data: JSON request body
            headers: Extra request headers

        Returns:
            JSON response as dictionary
        """
        return self._json(
            await self._request("POST", endpoint, json_data=json_data, headers=headers)
        )

    async def post_octet_stream(
        self,
        endpoint: str,
        content: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Make POST request with a raw binary body.

        Args:
            endpoint: API endpoint path
            content: Request body
            headers: Extra request headers

        Returns:
            JSON response as dictionary
        """
        request_headers = {"Content-Type": "application/octet-stream"}
        request_headers.update(headers or {})
        return self._json(
            await self._request("POST", endpoint, content=content, headers=request_headers)
        )

    async def download(self, url: str, output_path: Union[str, Path]) -> int:
        """
        Stream a URL's body into a file.

        The body is written to a ".part" file next to ``output_path`` and
        moved into place once complete, so a failed transfer never leaves
        a truncated file behind.

        Args:
            url: Absolute URL or path relative to the base URL
            output_path: Destination file

        Returns:
            Number of bytes written

        Raises:
            CrowdinAuthenticationError: If authentication fails (401)
            CrowdinAPIError: For HTTP or network errors
        """
        destination = Path(output_path)
        partial = destination.with_name(destination.name + ".part")
        written = 0

        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    await response.aread()
                    self._raise_for_status(response)

                with partial.open("wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
                        written += len(chunk)
        except httpx.RequestError as e:
            partial.unlink(missing_ok=True)
            logger.error(f"Download failed: {_sanitize_error_message(e)}")
            raise CrowdinAPIError(_sanitize_error_message(e)) from e
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

        partial.replace(destination)
        logger.debug(f"Downloaded {written} bytes to {destination}")
        return written

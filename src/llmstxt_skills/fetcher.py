"""Fetcher - Conditional retrieval of llms.txt documents.

Sends the previous cache validators (ETag / Last-Modified) so an unchanged
source answers 304 and nothing is downloaded again. Every failure surfaces as
SkillFetchError so callers can count it against a single entry.
"""

import ipaddress
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from .exceptions import SkillFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
USER_AGENT = "llmstxt-skills"


@dataclass(frozen=True)
class FetchResult:
    """Body plus validators; not_modified means the body was not re-downloaded."""

    content: str
    etag: str | None
    last_modified: str | None
    not_modified: bool = False


def validate_url(url: str) -> None:
    """
    Reject URLs the fetcher must never request.

    Only http(s) is allowed, and hosts resolving by name to loopback or
    literal private/reserved addresses are refused.

    Raises:
        SkillFetchError: If the URL is malformed or not allowed
    """
    try:
        parsed = urlparse(url)
        hostname = (parsed.hostname or "").lower()
    except ValueError as e:
        raise SkillFetchError(f"Invalid URL: {url} ({e})", context={"url": url}) from e

    if parsed.scheme not in ("http", "https"):
        raise SkillFetchError(f"Unsupported protocol {parsed.scheme!r} in URL: {url}", context={"url": url})

    if not hostname:
        raise SkillFetchError(f"Invalid URL: {url}", context={"url": url})

    if hostname == "localhost" or hostname.endswith(".localhost"):
        raise SkillFetchError(f"URL targets a private/reserved address: {url}", context={"url": url})

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return

    if address.is_private or address.is_loopback or address.is_link_local or address.is_reserved or address.is_unspecified:
        raise SkillFetchError(f"URL targets a private/reserved address: {url}", context={"url": url})


def _conditional_headers(etag: str | None, last_modified: str | None) -> dict[str, str]:
    headers = {"User-Agent": USER_AGENT}
    if etag:
        headers["If-None-Match"] = etag
    if last_modified:
        headers["If-Modified-Since"] = last_modified
    return headers


async def _get(
    url: str, headers: dict[str, str], timeout: float, client: httpx.AsyncClient | None
) -> httpx.Response:
    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
            return await own_client.get(url, headers=headers)
    return await client.get(url, headers=headers, timeout=timeout)


async def fetch_llms_txt(
    url: str,
    etag: str | None = None,
    last_modified: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> FetchResult:
    """
    Perform a conditional GET for a source document.

    Args:
        url: Document URL (llms.txt or llms-full.txt)
        etag: Previous ETag, sent as If-None-Match
        last_modified: Previous Last-Modified, sent as If-Modified-Since
        client: Optional shared HTTP client
        timeout: Request timeout in seconds
        max_bytes: Largest accepted body

    Returns:
        FetchResult; on 304 content is empty and not_modified is True

    Raises:
        SkillFetchError: On invalid URL, timeout, network error, non-2xx
            status, HTML body or oversize body
    """
    validate_url(url)
    headers = _conditional_headers(etag, last_modified)

    try:
        logger.debug(f"GET {url} (etag={etag!r}, last_modified={last_modified!r})")
        response = await _get(url, headers, timeout, client)
    except httpx.TimeoutException as e:
        raise SkillFetchError(f"Request timed out after {timeout:g}s: {url}", context={"url": url}) from e
    except httpx.InvalidURL as e:
        raise SkillFetchError(f"Invalid URL: {url} ({e})", context={"url": url}) from e
    except httpx.HTTPError as e:
        raise SkillFetchError(f"Failed to fetch {url}: {e}", context={"url": url}) from e

    if response.status_code == 304:
        logger.debug(f"{url} not modified")
        return FetchResult(
            content="",
            etag=response.headers.get("etag") or etag,
            last_modified=response.headers.get("last-modified") or last_modified,
            not_modified=True,
        )

    if not response.is_success:
        raise SkillFetchError(
            f"HTTP {response.status_code}: {response.reason_phrase} ({url})",
            context={"url": url, "status": response.status_code},
        )

    content_type = response.headers.get("content-type", "")
    if "text/html" in content_type:
        raise SkillFetchError(
            f"Received HTML instead of plain text from {url} - the URL may be invalid",
            context={"url": url, "content_type": content_type},
        )

    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise SkillFetchError(f"Response too large ({declared} bytes, max {max_bytes})", context={"url": url})

    if len(response.content) > max_bytes:
        raise SkillFetchError(
            f"Response too large ({len(response.content)} bytes, max {max_bytes})", context={"url": url}
        )

    return FetchResult(
        content=response.text,
        etag=response.headers.get("etag"),
        last_modified=response.headers.get("last-modified"),
    )

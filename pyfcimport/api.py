"""HTTP client for a linked data repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union
from urllib.parse import quote

import httpx

if TYPE_CHECKING:
    from .payload import UploadPayload

logger = logging.getLogger(__name__)

TURTLE_CONTENT_TYPE = "text/turtle"
SPARQL_UPDATE_CONTENT_TYPE = "application/sparql-update"

Payload = Union["UploadPayload", bytes, str]


def _materialize(payload: Payload) -> bytes:
    """Read the whole payload into memory before sending."""
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return payload.content


class RepositoryClient:
    """Creates and patches repository resources relative to a base URL.

    One ``httpx.Client`` is created on first use and reused for every
    request. Request failures are logged and reported as ``False``; they
    never raise.
    """

    def __init__(
        self,
        base_url: str,
        auth_header: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize repository client.

        Args:
            base_url: Repository base URL, ending with '/' so relative
                identifiers resolve beneath it
            auth_header: Optional precomputed Authorization header value
                (e.g. "Basic dXNlcjpwYXNz"), sent with every request
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = httpx.URL(base_url)
        self.auth_header = auth_header
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            headers = {}
            if self.auth_header is not None:
                headers["Authorization"] = self.auth_header
            self._client = httpx.Client(
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(
                    max_connections=None, max_keepalive_connections=None
                ),
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> RepositoryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def resolve(self, identifier: str) -> httpx.URL:
        """Resolve a relative identifier against the base URL.

        The identifier is percent-encoded first so characters such as
        '#', '?' and ':' stay part of the path.
        """
        return self.base_url.join(quote(identifier, safe="/"))

    def create(
        self,
        identifier: str,
        payload: Payload,
        mime_type: str | None = None,
    ) -> bool:
        """PUT a resource at the identifier.

        Args:
            identifier: Relative path of the resource
            payload: Resource content
            mime_type: Content-Type of the payload (default: text/turtle)

        Returns:
            True if the repository answered 201 Created, False otherwise
        """
        return self._send(
            "PUT",
            identifier,
            payload,
            mime_type or TURTLE_CONTENT_TYPE,
            int(httpx.codes.CREATED),
        )

    def patch(self, identifier: str, payload: Payload) -> bool:
        """PATCH a resource with a SPARQL update.

        Args:
            identifier: Relative path of the resource
            payload: SPARQL update text

        Returns:
            True if the repository answered 204 No Content, False otherwise
        """
        return self._send(
            "PATCH",
            identifier,
            payload,
            SPARQL_UPDATE_CONTENT_TYPE,
            int(httpx.codes.NO_CONTENT),
        )

    def _send(
        self,
        method: str,
        identifier: str,
        payload: Payload,
        content_type: str,
        expected_status: int,
    ) -> bool:
        url = self.resolve(identifier)
        content = _materialize(payload)
        logger.debug("Content: %r", content[:1024])

        try:
            response = self._get_client().request(
                method,
                url,
                content=content,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as e:
            logger.warning("Request failed: %s %s (%s)", method, url, e)
            logger.debug("Exception:", exc_info=e)
            return False

        logger.debug("URL: %s", url)
        logger.debug("Response: %s %s", response.status_code, response.reason_phrase)
        if response.status_code != expected_status:
            logger.warning(
                "%s %s returned %s %s (expected %s): %s",
                method,
                url,
                response.status_code,
                response.reason_phrase,
                expected_status,
                response.text[:500],
            )
            return False
        return True

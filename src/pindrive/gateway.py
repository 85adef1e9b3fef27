"""Content pin gateway: protocol plus a Pinata-backed implementation."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from .exceptions import InvalidInputError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_PINATA_URL = "https://api.pinata.cloud"


@runtime_checkable
class PinGateway(Protocol):
    """Stores content on the content-addressed network and releases it."""

    async def pin(self, content: bytes, *, filename: str | None = None) -> str:
        """Pin *content* and return its content handle (CID)."""
        ...

    async def unpin(self, handle: str) -> None:
        """Release the pin on *handle*.  Raises ``UpstreamUnavailableError`` on failure."""
        ...


class PinataGateway:
    """Async client for the Pinata pinning API.

    Pinning authenticates with the API key pair, unpinning with the JWT.
    Every transport error or non-2xx reply becomes
    ``UpstreamUnavailableError``; nothing is retried.

    An existing ``httpx.AsyncClient`` may be passed in (tests use one
    with a ``MockTransport``); otherwise the gateway owns its client and
    closes it in ``close()``.
    """

    def __init__(
        self,
        *,
        api_key: str = "",
        secret_api_key: str = "",
        jwt: str = "",
        base_url: str = DEFAULT_PINATA_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._secret_api_key = secret_api_key
        self._jwt = jwt
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> PinataGateway:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"Pinata {method} {url} failed with status {exc.response.status_code}"
            raise UpstreamUnavailableError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Pinata {method} {url} failed: {exc}"
            raise UpstreamUnavailableError(msg) from exc
        return response

    async def pin(self, content: bytes, *, filename: str | None = None) -> str:
        response = await self._request(
            "POST",
            "/pinning/pinFileToIPFS",
            files={"file": (filename or "upload", content)},
            headers={
                "pinata_api_key": self._api_key,
                "pinata_secret_api_key": self._secret_api_key,
            },
        )
        try:
            handle = response.json()["IpfsHash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise UpstreamUnavailableError("Pinata reply did not contain IpfsHash") from exc
        logger.debug("Pinned %s (%d bytes) as %s", filename, len(content), handle)
        return handle

    async def unpin(self, handle: str) -> None:
        if not handle:
            raise InvalidInputError("content handle is required")
        await self._request(
            "DELETE",
            f"/pinning/unpin/{handle}",
            headers={"Authorization": f"Bearer {self._jwt}"},
        )
        logger.debug("Unpinned %s", handle)

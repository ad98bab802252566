"""Live video provider client.

The core only needs four provider calls; `VideoProvider` is the seam tests
replace, `LivepeerClient` talks to a Livepeer-style REST API over httpx.
"""

from typing import Protocol

import httpx
from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.domain.utils.idgen import new_ulid
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .provider_schemas import (
    DEFAULT_PROFILES,
    CreateStreamBody,
    ProviderSession,
    ProviderSessionConfig,
    ProviderSessionStatus,
    ProviderStream,
)


class ProviderUnavailableError(AppError):
    """Transient provider failure. Callers may retry; the server does not."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        super().__init__(
            errcode=AppErrorCode.E_PROVIDER_UNAVAILABLE,
            errmesg=f"Video provider unavailable during {operation}: {detail}",
            status_code=HttpStatusCode.SERVICE_UNAVAILABLE,
        )


class VideoProvider(Protocol):
    async def create_session(self, config: ProviderSessionConfig) -> ProviderSession: ...

    async def delete_session(self, provider_session_id: str) -> bool: ...

    async def get_session_status(self, provider_session_id: str) -> ProviderSessionStatus: ...

    async def delete_asset(self, provider_asset_id: str) -> bool: ...


class LivepeerClient:
    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        rtmp_base_url: str,
        playback_base_url: str,
        timeout: float = 30,
        demo_mode: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.rtmp_base_url = rtmp_base_url.rstrip("/")
        self.playback_base_url = playback_base_url.rstrip("/")
        self.timeout = timeout
        self.demo_mode = demo_mode
        self._transport = transport

    def _build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if extra:
            headers.update(extra)
        return headers

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise AppError(
                errcode=AppErrorCode.E_PROVIDER_NOT_CONFIGURED,
                errmesg="PROVIDER_API_KEY is required when DEMO_MODE=false",
                status_code=HttpStatusCode.SERVICE_UNAVAILABLE,
            )
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._build_headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    def ingest_url(self, stream_key: str) -> str:
        return f"{self.rtmp_base_url}/{stream_key}"

    def playback_url(self, playback_id: str) -> str:
        return f"{self.playback_base_url}/{playback_id}/index.m3u8"

    async def create_session(self, config: ProviderSessionConfig) -> ProviderSession:
        """Allocate a provider stream with recording enabled."""
        if self.demo_mode:
            logger.info("Provider client DEMO_MODE=true: returning stubbed stream")
            stream = ProviderStream(
                id=new_ulid("demo_st_"),
                stream_key=new_ulid("demo_key_"),
                playback_id=new_ulid("demo_pb_"),
            )
        else:
            body = CreateStreamBody(name=config.name, record=config.record, profiles=DEFAULT_PROFILES)
            try:
                async with self._client() as client:
                    response = await client.post("/stream", json=body.model_dump())
                    response.raise_for_status()
                    stream = ProviderStream.model_validate(response.json())
            except httpx.HTTPError as e:
                logger.error("Provider create_session failed: {}", e)
                raise ProviderUnavailableError("create_session", str(e)) from e

        logger.info("✅ Provider stream {} allocated for '{}'", stream.id, config.name)
        return ProviderSession(
            provider_session_id=stream.id,
            stream_key=stream.stream_key,
            ingest_url=self.ingest_url(stream.stream_key),
            playback_url=self.playback_url(stream.playback_id),
        )

    async def _delete(self, operation: str, path: str) -> bool:
        if self.demo_mode:
            logger.info("Provider client DEMO_MODE=true: stubbed {} (no-op)", operation)
            return True

        try:
            async with self._client() as client:
                response = await client.delete(path)
                if response.status_code == HttpStatusCode.NOT_FOUND:
                    logger.info("Provider {} {}: already gone", operation, path)
                    return False
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Provider {} failed: {}", operation, e)
            raise ProviderUnavailableError(operation, str(e)) from e
        return True

    async def delete_session(self, provider_session_id: str) -> bool:
        """Delete a provider stream. Returns False when the provider no longer knows it."""
        return await self._delete("delete_session", f"/stream/{provider_session_id}")

    async def delete_asset(self, provider_asset_id: str) -> bool:
        """Delete a recorded asset. Returns False when the provider no longer knows it."""
        return await self._delete("delete_asset", f"/asset/{provider_asset_id}")

    async def get_session_status(self, provider_session_id: str) -> ProviderSessionStatus:
        if self.demo_mode:
            logger.info("Provider client DEMO_MODE=true: returning stubbed status")
            return ProviderSessionStatus(is_active=False, is_healthy=True, viewer_count=0)

        try:
            async with self._client() as client:
                response = await client.get(f"/stream/{provider_session_id}")
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("Provider get_session_status failed: {}", e)
            raise ProviderUnavailableError("get_session_status", str(e)) from e

        return ProviderSessionStatus(
            is_active=bool(data.get("isActive")),
            is_healthy=bool(data.get("isHealthy")),
            viewer_count=int(data.get("viewerCount") or 0),
        )


def build_provider_client() -> LivepeerClient:
    app_config = get_app_environ_config()
    return LivepeerClient(
        base_url=app_config.PROVIDER_API_BASE_URL,
        api_key=app_config.PROVIDER_API_KEY,
        rtmp_base_url=app_config.PROVIDER_RTMP_BASE_URL,
        playback_base_url=app_config.PROVIDER_PLAYBACK_BASE_URL,
        timeout=app_config.PROVIDER_REQUEST_TIMEOUT_SECONDS,
        demo_mode=app_config.DEMO_MODE,
    )


provider_client = build_provider_client()

__all__ = [
    "LivepeerClient",
    "ProviderUnavailableError",
    "VideoProvider",
    "build_provider_client",
    "provider_client",
]

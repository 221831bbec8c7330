"""TikTok Content Posting API publisher.

Flow: init a FILE_UPLOAD post (title + privacy), PUT the file in chunks to
the returned upload URL, then poll the publish status until TikTok reports
PUBLISH_COMPLETE or FAILED.

API Reference:
- https://developers.tiktok.com/doc/content-posting-api-reference-direct-post
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from tiktok_automator.config import TikTokConfig

from ..base import PlatformPublisher, ProgressCallback, PublishResult
from ..credentials import CredentialError, CredentialStore

_logger = logging.getLogger("tiktok_api")


MAX_VIDEO_SIZE = 4 * 1024 * 1024 * 1024  # 4GB
MIN_CHUNK_SIZE = 5 * 1024 * 1024
MAX_CHUNK_SIZE = 64 * 1024 * 1024  # Files above this are uploaded in chunks
MAX_TITLE_LENGTH = 2200


class TikTokAPIError(Exception):
    """TikTok API error."""

    def __init__(self, message: str, error_code: Optional[str] = None, log_id: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
        self.log_id = log_id


def plan_chunks(video_size: int) -> tuple[int, int]:
    """Return (chunk_size, chunk_count) for a file of ``video_size`` bytes.

    Small files go up in one piece. Larger files use MAX_CHUNK_SIZE chunks;
    the trailing remainder is merged into the last chunk when it would be
    smaller than MIN_CHUNK_SIZE.
    """
    if video_size <= MAX_CHUNK_SIZE:
        return video_size, 1
    count = video_size // MAX_CHUNK_SIZE
    if video_size % MAX_CHUNK_SIZE >= MIN_CHUNK_SIZE:
        count += 1
    return MAX_CHUNK_SIZE, max(1, count)


class TikTokPublisher(PlatformPublisher):
    """Publishes videos through TikTok's Content Posting API.

    Posts stay at the configured privacy level (SELF_ONLY by default) until
    the app passes TikTok's audit.
    """

    platform_name = "tiktok"

    def __init__(
        self,
        config: TikTokConfig,
        credentials: CredentialStore,
        progress_callback: ProgressCallback = None,
        poll_interval: float = 10.0,
        max_wait_seconds: float = 600.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize TikTok publisher.

        Args:
            config: TikTok app settings.
            credentials: Store providing a valid access token.
            progress_callback: Optional callback for progress updates.
            poll_interval: Seconds between publish status checks.
            max_wait_seconds: Give up waiting for processing after this long.
            http_client: Pre-built client (tests pass one with a mock transport).
        """
        super().__init__(progress_callback)
        self.config = config
        self.credentials = credentials
        self.poll_interval = poll_interval
        self.max_wait_seconds = max_wait_seconds
        self._http_client = http_client

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        return f"{self.config.api_base_url.rstrip('/')}/{endpoint}"

    async def _send(self, request: httpx.Request, timeout: float) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.send(request)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.send(request)

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[dict] = None,
        content: Optional[bytes] = None,
        headers: Optional[dict] = None,
        timeout: float = 60.0,
    ) -> dict:
        """Make an authorized request to the TikTok API.

        Returns:
            JSON response as dict (empty for bodies that are not JSON).

        Raises:
            TikTokAPIError: On HTTP errors or an error object in the body.
        """
        token = await self.credentials.valid_access_token()
        headers = dict(headers or {})
        headers["Authorization"] = f"Bearer {token}"
        if json_data is not None:
            headers["Content-Type"] = "application/json; charset=UTF-8"

        _logger.info(f"TikTok API: {method} {endpoint if not endpoint.startswith('http') else 'upload'}")

        request = httpx.Request(
            method,
            self._url(endpoint),
            headers=headers,
            json=json_data,
            content=content,
        )
        try:
            response = await self._send(request, timeout)
        except httpx.HTTPError as e:
            raise TikTokAPIError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        error = body.get("error") or {}
        error_code = error.get("code")
        if response.status_code >= 400 or (error_code and error_code != "ok"):
            raise TikTokAPIError(
                message=error.get("message") or f"HTTP {response.status_code}: {response.text[:200]}",
                error_code=error_code,
                log_id=error.get("log_id"),
            )
        return body

    async def _init_upload(
        self,
        title: str,
        video_size: int,
        chunk_size: int,
        chunk_count: int,
        privacy_level: str,
    ) -> tuple[str, str]:
        """Create the post and return (publish_id, upload_url)."""
        result = await self._request(
            "POST",
            "post/publish/video/init/",
            json_data={
                "post_info": {
                    "title": title[:MAX_TITLE_LENGTH],
                    "privacy_level": privacy_level,
                    "disable_duet": False,
                    "disable_comment": False,
                    "disable_stitch": False,
                },
                "source_info": {
                    "source": "FILE_UPLOAD",
                    "video_size": video_size,
                    "chunk_size": chunk_size,
                    "total_chunk_count": chunk_count,
                },
            },
        )
        data = result.get("data", {})
        publish_id = data.get("publish_id")
        upload_url = data.get("upload_url")
        if not publish_id or not upload_url:
            raise TikTokAPIError("Init response did not include publish_id/upload_url")
        return publish_id, upload_url

    async def _upload(self, upload_url: str, video_path: Path, chunk_size: int, chunk_count: int) -> None:
        video_size = video_path.stat().st_size
        with open(video_path, "rb") as f:
            for index in range(chunk_count):
                start = index * chunk_size
                # Last chunk carries whatever is left
                length = video_size - start if index == chunk_count - 1 else chunk_size
                chunk = f.read(length)
                await self._request(
                    "PUT",
                    upload_url,
                    content=chunk,
                    headers={
                        "Content-Type": "video/mp4",
                        "Content-Range": f"bytes {start}-{start + len(chunk) - 1}/{video_size}",
                    },
                    timeout=300.0,
                )
                await self.report(
                    "upload",
                    10.0 + 40.0 * (index + 1) / chunk_count,
                    f"Uploaded chunk {index + 1}/{chunk_count}",
                )

    async def fetch_status(self, publish_id: str) -> dict:
        """Current processing status of a post."""
        result = await self._request(
            "POST",
            "post/publish/status/fetch/",
            json_data={"publish_id": publish_id},
        )
        return result.get("data", {})

    async def _wait_for_publish(self, publish_id: str) -> dict:
        elapsed = 0.0
        while True:
            status = await self.fetch_status(publish_id)
            state = (status.get("status") or "").upper()

            if state == "PUBLISH_COMPLETE":
                return status
            if state == "FAILED":
                raise TikTokAPIError(f"Video publish failed: {status.get('fail_reason') or 'unknown reason'}")
            if elapsed >= self.max_wait_seconds:
                raise TikTokAPIError(f"Video publish timed out after {int(elapsed)}s (last status {state or 'none'})")

            await asyncio.sleep(self.poll_interval)
            elapsed += self.poll_interval
            await self.report(
                "processing",
                min(90.0, 50.0 + 40.0 * elapsed / max(self.max_wait_seconds, 1.0)),
                f"Processing video... ({int(elapsed)}s)",
            )

    async def publish_reel(
        self,
        video_path: Path,
        caption: str,
        **kwargs: Any,
    ) -> PublishResult:
        """Upload and publish a video.

        Args:
            video_path: Path to the video file.
            caption: Caption including hashtags (sent as the post title).
            **kwargs: ``privacy_level`` overrides the configured level.

        Returns:
            PublishResult; failures are reported in it, not raised.
        """
        video_path = Path(video_path)
        if not video_path.is_file():
            return self.failed(f"Video file not found: {video_path}")

        video_size = video_path.stat().st_size
        if video_size == 0 or video_size > MAX_VIDEO_SIZE:
            return self.failed(f"Unsupported video size: {video_size / 1024 / 1024:.1f}MB")

        privacy_level = kwargs.get("privacy_level") or self.config.privacy_level
        chunk_size, chunk_count = plan_chunks(video_size)

        try:
            await self.report("init", 5.0, "Initializing TikTok upload...")
            publish_id, upload_url = await self._init_upload(
                caption, video_size, chunk_size, chunk_count, privacy_level
            )

            await self.report("upload", 10.0, "Uploading video...")
            await self._upload(upload_url, video_path, chunk_size, chunk_count)

            await self.report("processing", 50.0, "Processing video...")
            status = await self._wait_for_publish(publish_id)
        except CredentialError as e:
            _logger.error(f"TikTok credentials unavailable: {e}")
            return self.failed(str(e))
        except TikTokAPIError as e:
            _logger.error(f"TikTok API error: {e}")
            return self.failed(str(e), error_code=e.error_code, log_id=e.log_id)
        except OSError as e:
            _logger.error(f"Could not read {video_path.name} during upload: {e}")
            return self.failed(f"Could not read video file: {e}")

        # TikTok's field name is misspelled in the API itself
        post_ids = status.get("publicaly_available_post_id") or []
        post_id = str(post_ids[0]) if post_ids else None

        await self.report("complete", 100.0, "Published to TikTok")
        _logger.info(f"TikTok publish complete: {post_id or publish_id}")

        return self.succeeded(
            post_id or publish_id,
            permalink=f"https://www.tiktok.com/video/{post_id}" if post_id else None,
            publish_id=publish_id,
            privacy_level=privacy_level,
        )

    async def check_credentials(self) -> tuple[bool, str]:
        """Verify app credentials and the stored token against user/info/."""
        is_valid, error_msg = self.config.validate_credentials()
        if not is_valid:
            return False, error_msg

        try:
            result = await self._request(
                "GET",
                "user/info/?fields=open_id,display_name",
            )
        except (CredentialError, TikTokAPIError) as e:
            return False, f"TikTok credential check failed: {e}"

        user = result.get("data", {}).get("user", {})
        return True, f"Connected to TikTok as {user.get('display_name', 'unknown')}"

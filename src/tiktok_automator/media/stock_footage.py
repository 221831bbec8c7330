"""Stock footage retrieval from the Pexels API.

Downloaded clips are recorded in ``index.json`` inside the stock directory
so later runs can reuse them without searching again:

    stock-videos/
        index.json          # {"<pexels id>": {"niche": ..., "file": ..., ...}}
        pexels-12345.mp4
"""

import json
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tiktok_automator.config import PexelsConfig
from tiktok_automator.constants import STOCK_INDEX_FILENAME
from tiktok_automator.content.niches import Niche

logger = logging.getLogger(__name__)


# Search queries per niche, tuned for vertical b-roll
NICHE_QUERIES: dict[Niche, tuple[str, ...]] = {
    Niche.AI_TOOLS: (
        "technology computer",
        "coding programming",
        "robot artificial intelligence",
        "futuristic technology",
        "digital interface",
        "laptop working",
    ),
    Niche.ONLINE_BUSINESS: (
        "entrepreneur laptop",
        "money success",
        "working coffee shop",
        "startup office",
        "typing keyboard",
    ),
    Niche.FACELESS_STORIES: (
        "motivation success",
        "city lights night",
        "sunrise inspiration",
        "walking alone",
        "journey path",
    ),
}


class StockFootageError(Exception):
    """Stock footage search or download failed."""


def is_portrait(item: dict) -> bool:
    return (item.get("height") or 0) > (item.get("width") or 0)


def select_video_file(video: dict, quality: str = "hd") -> Optional[dict]:
    """Pick the best vertical file of a Pexels video.

    Preference: portrait in ``quality``, then portrait SD, then any portrait.
    Landscape files are never returned.
    """
    files = [f for f in video.get("video_files", []) if f.get("link") and is_portrait(f)]
    for wanted in (quality, "sd"):
        match = next((f for f in files if f.get("quality") == wanted), None)
        if match:
            return match
    return files[0] if files else None


class PexelsClient:
    """Thin async wrapper over the Pexels video search and file CDN."""

    BASE_URL = "https://api.pexels.com/videos"

    def __init__(
        self,
        config: Optional[PexelsConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """``http_client`` replaces the lazily built client (tests pass one with a mock transport)."""
        self.config = config or PexelsConfig()
        self._client = http_client

    @property
    def api_key(self) -> str:
        key = self.config.api_key
        if key:
            return key
        raise StockFootageError(
            f"No Pexels API key: set {self.config.api_key_env} (free keys at https://www.pexels.com/api/)"
        )

    async def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            # Pexels takes the bare key, no Bearer prefix
            self._client = httpx.AsyncClient(
                headers={"Authorization": self.api_key}, timeout=30.0, follow_redirects=True
            )
        return self._client

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _get(self, url: str, params: dict) -> httpx.Response:
        client = await self._http()
        return await client.get(url, params=params)

    async def search_videos(
        self,
        query: str,
        orientation: Optional[str] = None,
        per_page: Optional[int] = None,
    ) -> list[dict]:
        """Raw ``videos`` list of a Pexels search; HTTP and network failures raise StockFootageError."""
        params = {
            "query": query,
            "per_page": per_page or self.config.per_page,
            "orientation": orientation or self.config.orientation,
            "size": self.config.size,
        }

        try:
            response = await self._get(f"{self.BASE_URL}/search", params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StockFootageError(f"Pexels API error: {e}") from e

        return response.json().get("videos", [])

    async def download(self, url: str, output_path: Path) -> Path:
        """Stream a video file to disk.

        Raises:
            StockFootageError: If the download fails. Partial files are removed.
        """
        client = await self._http()
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with output_path.open("wb") as sink:
                    async for block in response.aiter_bytes(64 * 1024):
                        sink.write(block)
        except httpx.HTTPError as e:
            output_path.unlink(missing_ok=True)
            raise StockFootageError(f"Download failed: {e}") from e

        logger.info(f"Saved stock clip {output_path.name} ({output_path.stat().st_size} bytes)")
        return output_path

    async def check_connection(self) -> tuple[bool, str]:
        """Run a tiny search to verify the API key."""
        try:
            videos = await self.search_videos("nature", per_page=1)
        except StockFootageError as e:
            return False, str(e)
        return True, f"Pexels reachable ({len(videos)} result)"


class StockFootageService:
    """Finds a vertical stock clip for a niche, downloading or reusing one."""

    def __init__(
        self,
        stock_dir: Path,
        client: Optional[PexelsClient] = None,
        reuse_probability: float = 0.7,
        keep_count: int = 20,
    ):
        self.stock_dir = Path(stock_dir)
        self.client = client or PexelsClient()
        self.reuse_probability = reuse_probability
        self.keep_count = keep_count
        self.index_path = self.stock_dir / STOCK_INDEX_FILENAME
        self._index: dict[str, dict] = {}
        self._load_index()

    def _load_index(self) -> None:
        """Load index from disk, dropping entries whose files are gone."""
        self.stock_dir.mkdir(parents=True, exist_ok=True)

        if not self.index_path.exists():
            self._index = {}
            return

        try:
            data = json.loads(self.index_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable stock index {self.index_path}: {e}")
            data = {}

        self._index = {
            key: entry for key, entry in data.items()
            if (self.stock_dir / entry.get("file", "")).is_file()
        }

    def _save_index(self) -> None:
        self.stock_dir.mkdir(parents=True, exist_ok=True)
        self.index_path.write_text(json.dumps(self._index, indent=2, default=str), encoding="utf-8")

    def cached_for_niche(self, niche: Niche) -> list[Path]:
        return [
            self.stock_dir / entry["file"]
            for entry in self._index.values()
            if entry.get("niche") == niche.value
        ]

    async def get_video_for_niche(
        self,
        niche: "Niche | str",
        rng: Optional[random.Random] = None,
    ) -> Path:
        """Return a local vertical clip suited to ``niche``.

        Raises:
            StockFootageError: If nothing suitable can be found or downloaded.
        """
        niche = Niche.parse(niche)
        rng = rng or random.Random()

        cached = self.cached_for_niche(niche)
        if cached and rng.random() < self.reuse_probability:
            path = rng.choice(cached)
            logger.info(f"Using cached stock video: {path.name}")
            return path

        query = rng.choice(NICHE_QUERIES[niche])
        logger.info(f"Searching stock video for {niche.value}: '{query}'")
        videos = await self.client.search_videos(query, orientation="portrait")

        candidates = [
            (video, video_file)
            for video in videos[: self.client.config.candidates]
            if (video_file := select_video_file(video, self.client.config.quality))
        ]
        if not candidates:
            raise StockFootageError(f"No vertical videos found for query: {query}")

        video, video_file = rng.choice(candidates)
        filename = f"pexels-{video['id']}.mp4"
        path = await self.client.download(video_file["link"], self.stock_dir / filename)

        self._index[str(video["id"])] = {
            "niche": niche.value,
            "file": filename,
            "query": query,
            "width": video_file.get("width"),
            "height": video_file.get("height"),
            "quality": video_file.get("quality"),
            "pexels_url": video.get("url", ""),
            "downloaded_at": datetime.now().isoformat(),
        }
        self._save_index()
        self.cleanup_old_videos(self.keep_count)
        return path

    def cleanup_old_videos(self, keep: int = 20) -> int:
        """Delete the oldest downloaded clips beyond ``keep``.

        Returns:
            Number of clips removed.
        """
        if len(self._index) <= keep:
            return 0

        by_age = sorted(self._index.items(), key=lambda item: item[1].get("downloaded_at", ""))
        removed = 0
        for key, entry in by_age[: len(self._index) - keep]:
            try:
                (self.stock_dir / entry["file"]).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete {entry['file']}: {e}")
                continue
            del self._index[key]
            removed += 1

        self._save_index()
        logger.info(f"Removed {removed} old stock video(s)")
        return removed

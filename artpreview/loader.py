"""
Image loading for the art preview compositor.

This module handles:
- Resolving a source reference (path, file:// URI or http(s) URL) to an RGBA image
- Decoding files off the event loop and fetching URLs with httpx
- Sharing in-flight loads and keeping a bounded LRU cache of decoded images
- Reducing every failure to "layer absent" (None)
"""

import asyncio
import io
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

import httpx
from PIL import Image
from loguru import logger

from .errors import AssetUnavailableError


class ImageLoader:
    """Loads preview layers; never raises on a missing or broken source."""

    def __init__(self, assets_dir: Path = None, http_timeout: float = 15.0, cache_enabled: bool = True,
                 cache_size: int = 32):
        self.assets_dir = Path(assets_dir) if assets_dir else None
        self.http_timeout = http_timeout
        self.cache_enabled = cache_enabled
        self.cache_size = max(1, cache_size)
        self._cache: "OrderedDict[str, Image.Image]" = OrderedDict()
        self._inflight: Dict[str, asyncio.Future] = {}

    async def load(self, source: Optional[str]) -> Optional[Image.Image]:
        """
        Load one image.

        Returns a fresh RGBA copy, or None when the reference is empty or the
        image could not be fetched or decoded.
        """
        if not source:
            return None
        source = str(source)

        if source in self._cache:
            self._cache.move_to_end(source)
            return self._cache[source].copy()

        pending = self._inflight.get(source)
        if pending is None:
            pending = asyncio.ensure_future(self._load_uncached(source))
            self._inflight[source] = pending
            pending.add_done_callback(lambda _f, key=source: self._inflight.pop(key, None))

        image = await asyncio.shield(pending)
        if image is None:
            return None

        if self.cache_enabled:
            self._remember(source, image)
        return image.copy()

    async def load_many(self, *sources: Optional[str]):
        """Load several images concurrently and wait until all have settled."""
        return await asyncio.gather(*(self.load(source) for source in sources))

    def clear_cache(self) -> None:
        self._cache.clear()

    def _remember(self, source: str, image: Image.Image) -> None:
        self._cache[source] = image
        self._cache.move_to_end(source)
        while len(self._cache) > self.cache_size:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Evicted cached image: {evicted}")

    async def _load_uncached(self, source: str) -> Optional[Image.Image]:
        try:
            if urlparse(source).scheme in ("http", "https"):
                image = await self._fetch_url(source)
            else:
                image = await asyncio.to_thread(self._decode_file, self._resolve_path(source))
            logger.debug(f"Loaded image: {source} ({image.size})")
            return image
        except AssetUnavailableError as e:
            logger.warning(f"{e.message} ({e.details['reason']})")
            return None
        except (ValueError, OSError, httpx.InvalidURL) as e:
            # Malformed references (bad IPv6 host, embedded NUL, unusable path)
            logger.warning(f"Image asset unavailable: {source} (invalid reference: {e})")
            return None

    def _resolve_path(self, source: str) -> Path:
        parsed = urlparse(source)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))

        path = Path(source)
        if not path.is_absolute() and self.assets_dir is not None:
            candidate = self.assets_dir / source.lstrip("/")
            if candidate.exists() or not path.exists():
                return candidate
        return path

    @staticmethod
    def _decode_file(path: Path) -> Image.Image:
        if not path.exists():
            raise AssetUnavailableError(str(path), "file not found")
        try:
            with Image.open(path) as img:
                img.load()
                return img.convert('RGBA')
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise AssetUnavailableError(str(path), f"decode failed: {e}")

    async def _fetch_url(self, url: str) -> Image.Image:
        try:
            async with httpx.AsyncClient(timeout=self.http_timeout, follow_redirects=True) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise AssetUnavailableError(url, f"fetch failed: {e}")

        try:
            with Image.open(io.BytesIO(response.content)) as img:
                img.load()
                return img.convert('RGBA')
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise AssetUnavailableError(url, f"decode failed: {e}")


def create_image_loader(config) -> ImageLoader:
    """Factory function to create an ImageLoader from the app configuration."""
    return ImageLoader(
        assets_dir=Path(config.ASSETS_DIRECTORY),
        http_timeout=config.HTTP_TIMEOUT,
        cache_enabled=config.LOADER_CACHE_ENABLED,
        cache_size=config.LOADER_CACHE_SIZE,
    )

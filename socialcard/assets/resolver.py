"""Logo loading for card renders.

``ImageResolver.resolve`` turns a set of URLs into an ``ImageBatch``: cached
entries settle immediately, the rest load on a thread pool.  Every load
settles (with a bitmap or with ``None``) and the batch publishes one
``url -> image`` map once all of them have.  A cancelled batch never
publishes, though its loads still land in the shared cache.
"""
from __future__ import annotations

import io
import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from socialcard.models import TemplateData

LOGGER = logging.getLogger(__name__)

ImageResult = dict[str, "Image.Image | None"]

_FAILED = object()


class ImageCache:
    """Thread-safe, append-only ``url -> image`` store; failed URLs are remembered too."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, object] = {}

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def lookup(self, url: str) -> tuple[bool, Image.Image | None]:
        with self._lock:
            if url not in self._entries:
                return False, None
            entry = self._entries[url]
        return True, (None if entry is _FAILED else entry)

    def store(self, url: str, image: Image.Image | None) -> None:
        with self._lock:
            self._entries.setdefault(url, _FAILED if image is None else image)


class ImageBatch:
    def __init__(self, urls: list[str], on_settled: Callable[[ImageResult], None] | None = None) -> None:
        self.urls = list(urls)
        self._on_settled = on_settled
        self._lock = threading.Lock()
        self._images: ImageResult = {}
        self._pending = len(self.urls)
        self._done = threading.Event()
        self._cancelled = False
        self._futures: list[Future] = []
        if self._pending == 0:
            self._publish()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._done.is_set()

    def settle(self, url: str, image: Image.Image | None) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._images[url] = image
            self._pending -= 1
            finished = self._pending == 0
        if finished:
            self._publish()

    def track(self, future: Future) -> None:
        self._futures.append(future)

    def cancel(self) -> None:
        with self._lock:
            if self._done.is_set():
                return
            self._cancelled = True
        for future in self._futures:
            future.cancel()
        self._done.set()

    def result(self, timeout: float | None = None) -> ImageResult:
        if not self._done.wait(timeout):
            raise TimeoutError(f"image batch did not settle within {timeout}s")
        if self._cancelled:
            raise CancelledError("image batch was cancelled")
        return dict(self._images)

    def snapshot(self) -> ImageResult:
        """Whatever has settled so far; unsettled URLs map to ``None``."""
        with self._lock:
            return {url: self._images.get(url) for url in self.urls}

    def _publish(self) -> None:
        self._done.set()
        if self._on_settled is not None:
            self._on_settled(dict(self._images))


def decode_image(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as image:
        return ImageOps.exif_transpose(image).convert("RGBA").copy()


class ImageResolver:
    def __init__(
        self,
        cache: ImageCache | None = None,
        asset_root: Path | str | None = None,
        workers: int = 4,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.cache = cache if cache is not None else ImageCache()
        self.asset_root = Path(asset_root) if asset_root else Path.cwd()
        self.timeout = timeout
        self._session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(workers)), thread_name_prefix="socialcard-load")

    def local_path(self, url: str) -> Path:
        return self.asset_root / url.lstrip("/")

    def load(self, url: str) -> Image.Image:
        if url.startswith(("http://", "https://")):
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return decode_image(response.content)
        return decode_image(self.local_path(url).read_bytes())

    def _load_into(self, batch: ImageBatch, url: str) -> None:
        image: Image.Image | None = None
        try:
            image = self.load(url)
        except (OSError, UnidentifiedImageError, requests.RequestException) as exc:
            LOGGER.warning("Failed to load image %s: %s", url, exc)
        except Exception as exc:
            # 解码炸弹等非 IO 错误同样按加载失败处理
            LOGGER.warning("Failed to decode image %s: %s: %s", url, type(exc).__name__, exc)
        finally:
            self.cache.store(url, image)
            batch.settle(url, image)

    def resolve(self, urls: Iterable[str], on_settled: Callable[[ImageResult], None] | None = None) -> ImageBatch:
        unique = list(dict.fromkeys(url for url in urls if url))
        batch = ImageBatch(unique, on_settled)
        for url in unique:
            hit, image = self.cache.lookup(url)
            if hit:
                LOGGER.debug("image cache hit: %s", url)
                batch.settle(url, image)
                continue
            batch.track(self._executor.submit(self._load_into, batch, url))
        return batch

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._session.close()

    def __enter__(self) -> "ImageResolver":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()


def collect_image_urls(data: TemplateData, brand_logo_url: str | None) -> list[str]:
    """Brand logo first, then each token logo, without duplicates."""
    urls: list[str] = []
    if brand_logo_url:
        urls.append(brand_logo_url)
    for token in data.tokens:
        url = token.resolve_logo_url()
        if url and url not in urls:
            urls.append(url)
    return urls

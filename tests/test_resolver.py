import struct
import threading
import zlib
from concurrent.futures import CancelledError
from pathlib import Path

import pytest
from PIL import Image

from socialcard.assets.resolver import ImageCache, ImageResolver, collect_image_urls
from socialcard.models import TemplateData, TokenInfo


def _write_logo(root: Path, name: str, color=(255, 0, 0, 255)) -> None:
    path = root / "tokens" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (8, 8), color).save(path)


def test_empty_url_set_publishes_immediately(tmp_path: Path) -> None:
    published = []
    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:
        batch = resolver.resolve([], on_settled=published.append)
        assert batch.done()
        assert published == [{}]
        assert batch.result(timeout=0) == {}


def test_failed_load_settles_as_none(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write_logo(tmp_path, "abc.png")
    with ImageResolver(asset_root=tmp_path, workers=2) as resolver:
        images = resolver.resolve(["/tokens/abc.png", "/tokens/missing.png"]).result(timeout=5)

        assert images["/tokens/abc.png"].size == (8, 8)
        assert images["/tokens/abc.png"].mode == "RGBA"
        assert images["/tokens/missing.png"] is None
        assert "/tokens/missing.png" in resolver.cache
        assert resolver.cache.lookup("/tokens/missing.png") == (True, None)
    assert any("missing.png" in record.getMessage() for record in caplog.records)


def test_cache_reuse_skips_loads(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_logo(tmp_path, "abc.png")
    cache = ImageCache()
    with ImageResolver(cache=cache, asset_root=tmp_path, workers=1) as resolver:
        resolver.resolve(["/tokens/abc.png"]).result(timeout=5)

        def fail_load(url: str):
            raise AssertionError(f"unexpected load of {url}")

        monkeypatch.setattr(resolver, "load", fail_load)
        batch = resolver.resolve(["/tokens/abc.png", "/tokens/abc.png"])
        # 命中缓存时同步完成
        assert batch.done()
        assert list(batch.result(timeout=0)) == ["/tokens/abc.png"]
    assert len(cache) == 1


def test_failures_are_not_retried(tmp_path: Path) -> None:
    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:
        resolver.resolve(["/tokens/none.png"]).result(timeout=5)
        _write_logo(tmp_path, "none.png")
        assert resolver.resolve(["/tokens/none.png"]).result(timeout=5) == {"/tokens/none.png": None}


def test_cancelled_batch_never_publishes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    release = threading.Event()
    published = []

    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:

        def slow_load(url: str) -> Image.Image:
            release.wait(5)
            return Image.new("RGBA", (2, 2))

        monkeypatch.setattr(resolver, "load", slow_load)
        batch = resolver.resolve(["/a.png", "/b.png"], on_settled=published.append)
        batch.cancel()
        release.set()
        with pytest.raises(CancelledError):
            batch.result(timeout=1)
        assert batch.cancelled
    assert published == []


def test_result_times_out(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    release = threading.Event()
    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:
        monkeypatch.setattr(resolver, "load", lambda url: release.wait(5) and Image.new("RGBA", (2, 2)))
        batch = resolver.resolve(["/slow.png"])
        with pytest.raises(TimeoutError):
            batch.result(timeout=0.05)
        release.set()
        assert batch.result(timeout=5)["/slow.png"] is not None


def test_collect_image_urls_brand_first_without_duplicates() -> None:
    data = TemplateData(
        template="new-pair",
        tokens=(TokenInfo(symbol="DGKO"), TokenInfo(symbol="KLV", logo_url="https://cdn.example.com/klv.png")),
    )
    assert collect_image_urls(data, "/tokens/dgko.png") == ["/tokens/dgko.png", "https://cdn.example.com/klv.png"]
    assert collect_image_urls(TemplateData(template="milestone"), None) == []


def _write_bomb_header_png(path: Path, width: int = 20000, height: int = 20000) -> None:
    # 只有头部声明了超大尺寸，解码时触发 DecompressionBombError
    def chunk(kind: bytes, payload: bytes) -> bytes:
        return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))

    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b""))


def test_decode_errors_settle_as_none(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write_bomb_header_png(tmp_path / "tokens" / "abc.png")
    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:
        images = resolver.resolve(["/tokens/abc.png"]).result(timeout=5)
        assert images == {"/tokens/abc.png": None}
        assert resolver.cache.lookup("/tokens/abc.png") == (True, None)
    assert "abc.png" in caplog.text


def test_unexpected_loader_error_still_settles(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_load(url: str) -> Image.Image:
        raise ValueError("bad pixel data")

    with ImageResolver(asset_root=tmp_path, workers=1) as resolver:
        monkeypatch.setattr(resolver, "load", broken_load)
        assert resolver.resolve(["/x.png", "/y.png"]).result(timeout=5) == {"/x.png": None, "/y.png": None}


def test_snapshot_reports_settled_so_far(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_logo(tmp_path, "abc.png")
    release = threading.Event()
    with ImageResolver(asset_root=tmp_path, workers=2) as resolver:
        resolver.resolve(["/tokens/abc.png"]).result(timeout=5)
        monkeypatch.setattr(resolver, "load", lambda url: release.wait(5) and Image.new("RGBA", (2, 2)))
        batch = resolver.resolve(["/tokens/abc.png", "/slow.png"])
        snapshot = batch.snapshot()
        assert snapshot["/tokens/abc.png"].size == (8, 8)
        assert snapshot["/slow.png"] is None
        assert not batch.done()
        release.set()

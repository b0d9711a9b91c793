"""배지 다운로드·디코딩 테스트."""

import asyncio
from io import BytesIO

import aiohttp
import pytest
from PIL import Image

from content.badges import DecodedBadge, LayoutEntry
from errors import DecodeError, DownloadError, UnsupportedFormatError
from imvu.fetcher import FetchDecodeWorker, decode_badge_image, middle_frame_index
from renderer.layout import PositionResolver

from conftest import BLUE, GREEN, RED, WHITE, YELLOW, gif_bytes, image_bytes, make_badge


def _fake_fetch(responses: dict):
    """URL → bytes 또는 예외."""

    async def fetch(url: str) -> bytes:
        await asyncio.sleep(0)
        result = responses[url]
        if isinstance(result, Exception):
            raise result
        return result

    return fetch


class TestMiddleFrameIndex:
    def test_odd_count(self):
        assert middle_frame_index(5) == 2

    def test_even_count(self):
        assert middle_frame_index(4) == 2

    def test_single_frame(self):
        assert middle_frame_index(1) == 0


class TestDecodeBadgeImage:
    def test_png(self):
        img, fmt = decode_badge_image(image_bytes((10, 20, 30, 200)))
        assert fmt == "PNG"
        assert img.mode == "RGBA"
        assert img.getpixel((0, 0)) == (10, 20, 30, 200)

    def test_rgb_png_converted_to_rgba(self):
        img, _ = decode_badge_image(image_bytes((1, 2, 3), mode="RGB"))
        assert img.mode == "RGBA"
        assert img.getpixel((5, 5)) == (1, 2, 3, 255)

    def test_palette_png_converted_to_rgba(self):
        img, _ = decode_badge_image(image_bytes(7, mode="P"))
        assert img.mode == "RGBA"

    def test_jpeg(self):
        img, fmt = decode_badge_image(image_bytes((200, 10, 10), fmt="JPEG", mode="RGB"))
        assert fmt == "JPEG"
        assert img.mode == "RGBA"
        r, g, b, a = img.getpixel((10, 10))
        assert r > 180 and g < 40 and b < 40 and a == 255

    def test_gif_five_frames_uses_index_two(self):
        img, fmt = decode_badge_image(gif_bytes([RED, GREEN, BLUE, YELLOW, WHITE]))
        assert fmt == "GIF"
        assert img.getpixel((3, 3)) == (*BLUE, 255)

    def test_gif_four_frames_uses_index_two(self):
        img, _ = decode_badge_image(gif_bytes([RED, GREEN, BLUE, YELLOW]))
        assert img.getpixel((3, 3)) == (*BLUE, 255)

    def test_gif_two_frames_uses_index_one(self):
        img, _ = decode_badge_image(gif_bytes([RED, GREEN]))
        assert img.getpixel((3, 3)) == (*GREEN, 255)

    def test_single_frame_gif(self):
        img, fmt = decode_badge_image(gif_bytes([YELLOW]))
        assert fmt == "GIF"
        assert img.mode == "RGBA"
        assert img.getpixel((0, 0)) == (*YELLOW, 255)

    def test_format_detected_from_content(self):
        # 확장자가 아니라 바이트로 판단
        _, fmt = decode_badge_image(gif_bytes([RED, GREEN, BLUE]), "badge-1-1")
        assert fmt == "GIF"

    def test_unsupported_format(self):
        with pytest.raises(UnsupportedFormatError) as exc:
            decode_badge_image(image_bytes((1, 2, 3), fmt="TIFF", mode="RGB"), "badge-1-1")
        assert exc.value.image_format == "TIFF"
        assert exc.value.badge_id == "badge-1-1"

    def test_garbage_bytes(self):
        with pytest.raises(UnsupportedFormatError):
            decode_badge_image(b"<html>not an image</html>")

    def test_truncated_png(self):
        # 노이즈 이미지라 IDAT가 커서 절반을 잘라도 헤더는 남는다
        buf = BytesIO()
        Image.effect_noise((64, 64), 64).convert("RGB").save(buf, format="PNG")
        data = buf.getvalue()
        with pytest.raises(DecodeError) as exc:
            decode_badge_image(data[: len(data) // 2], "badge-1-1")
        assert exc.value.image_format == "PNG"


class TestFetchDecodeWorker:
    def test_success_returns_decoded_badge(self):
        badge = make_badge(100, 1, xloc=30, yloc=150)
        fetch = _fake_fetch({badge.image_url: image_bytes(RED)})
        worker = FetchDecodeWorker(fetch, PositionResolver())

        result = asyncio.run(worker.process(badge))

        assert isinstance(result, DecodedBadge)
        assert result.badge_id == "badge-100-1"
        assert result.position == (30, 50)
        assert result.source_format == "PNG"
        assert result.image.mode == "RGBA"

    def test_layout_position_used(self):
        badge = make_badge(100, 1, xloc=30, yloc=150)
        fetch = _fake_fetch({badge.image_url: image_bytes(RED)})
        resolver = PositionResolver([LayoutEntry("badge-100-1", 7, 9)])

        result = asyncio.run(FetchDecodeWorker(fetch, resolver).process(badge))

        assert result.position == (7, 9)

    def test_network_failure_is_skipped(self):
        badge = make_badge()
        fetch = _fake_fetch({badge.image_url: aiohttp.ClientConnectionError("unreachable")})

        result = asyncio.run(FetchDecodeWorker(fetch, PositionResolver()).process(badge))

        assert isinstance(result, DownloadError)
        assert result.badge_id == badge.badge_id

    def test_unsupported_format_is_skipped(self):
        badge = make_badge()
        fetch = _fake_fetch({badge.image_url: image_bytes((0, 0, 0), fmt="TIFF", mode="RGB")})

        result = asyncio.run(FetchDecodeWorker(fetch, PositionResolver()).process(badge))

        assert isinstance(result, UnsupportedFormatError)

    def test_skip_is_logged_with_id(self, caplog):
        badge = make_badge(5, 6)
        fetch = _fake_fetch({badge.image_url: b"garbage"})

        with caplog.at_level("ERROR"):
            asyncio.run(FetchDecodeWorker(fetch, PositionResolver()).process(badge))

        assert "badge-5-6" in caplog.text

"""배지 이미지 다운로드·디코딩 모듈.

배지 하나마다: 다운로드 → 포맷 감지(바이트 기준) → 디코딩 → RGBA 변환 → 위치 결정.
애니메이션 이미지는 전체 프레임 중 가운데 프레임(n_frames // 2) 하나만 사용한다.
"""

import logging
from collections.abc import Awaitable, Callable
from io import BytesIO

import aiohttp
from PIL import Image, UnidentifiedImageError

from content.badges import BadgeInfo, DecodedBadge
from errors import DecodeError, DownloadError, SkippableError, UnsupportedFormatError
from renderer.layout import PositionResolver

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[bytes]]

# 그대로 디코딩하는 정지 이미지 포맷
STATIC_FORMATS = frozenset({"PNG", "JPEG", "BMP", "WEBP"})
# 항상 프레임 샘플링을 거치는 애니메이션 포맷
ANIMATED_FORMATS = frozenset({"GIF"})


def http_fetcher(session: aiohttp.ClientSession) -> Fetch:
    """aiohttp 세션으로 URL의 바이트를 받아오는 fetch 함수를 만든다."""

    async def fetch(url: str) -> bytes:
        async with session.get(url) as resp:
            resp.raise_for_status()
            return await resp.read()

    return fetch


def middle_frame_index(n_frames: int) -> int:
    """가운데 프레임 인덱스 (정수 나눗셈)."""
    return n_frames // 2


def decode_badge_image(data: bytes, badge_id: str = "") -> tuple[Image.Image, str]:
    """이미지 바이트를 RGBA 이미지로 디코딩한다.

    Returns:
        (RGBA 이미지, 감지된 포맷 이름)
    """
    try:
        img = Image.open(BytesIO(data))
    except UnidentifiedImageError as e:
        raise UnsupportedFormatError(badge_id, "이미지 포맷을 알 수 없음") from e

    fmt = img.format or "UNKNOWN"
    n_frames = getattr(img, "n_frames", 1)
    animated = fmt in ANIMATED_FORMATS or (fmt in STATIC_FORMATS and n_frames > 1)
    if not animated and fmt not in STATIC_FORMATS:
        raise UnsupportedFormatError(badge_id, f"지원하지 않는 포맷: {fmt}", fmt)

    try:
        if animated:
            index = middle_frame_index(n_frames)
            logger.debug("애니메이션 배지 %s: %d프레임 중 %d번 사용", badge_id, n_frames, index)
            img.seek(index)
        rgba = img.convert("RGBA")
    except (OSError, ValueError, EOFError) as e:
        raise DecodeError(badge_id, f"디코딩 실패: {e}", fmt) from e

    return rgba, fmt


class FetchDecodeWorker:
    """배지 하나를 다운로드·디코딩하여 DecodedBadge로 만든다."""

    def __init__(self, fetch: Fetch, resolver: PositionResolver):
        self._fetch = fetch
        self._resolver = resolver

    async def process(self, badge: BadgeInfo) -> DecodedBadge | SkippableError:
        """배지를 처리한다. 실패하면 예외 대신 SkippableError를 반환한다."""
        badge_id = badge.badge_id
        try:
            data = await self._download(badge)
            image, fmt = decode_badge_image(data, badge_id)
        except SkippableError as e:
            logger.error("배지 건너뜀: %s (포맷: %s) %s", badge_id, e.image_format or "-", e.reason)
            return e

        position = self._resolver.resolve(badge)
        logger.debug("%s 배지 로드: %s -> (%d, %d)", fmt, badge_id, *position)
        return DecodedBadge(badge_id=badge_id, image=image, position=position, source_format=fmt)

    async def _download(self, badge: BadgeInfo) -> bytes:
        try:
            return await self._fetch(badge.image_url)
        except (aiohttp.ClientError, OSError) as e:
            raise DownloadError(badge.badge_id, f"다운로드 실패: {e}") from e

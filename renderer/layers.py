"""레이어 합성 모듈 — 배경 + 배지 오버레이."""

import logging
from collections.abc import Iterable

from PIL import Image

from content.badges import DecodedBadge
from .canvas import Canvas, WIDTH, HEIGHT

logger = logging.getLogger(__name__)


class BadgeCompositor:
    """배경 위에 디코딩된 배지들을 합성하여 최종 캔버스를 만든다."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        self._canvas = Canvas(width, height)
        self.rendered = 0

    def compose(
        self,
        background: Image.Image,
        badges: Iterable[DecodedBadge],
    ) -> Image.Image:
        """배경 위에 배지들을 도착 순서대로 합성하여 RGBA 이미지를 반환한다.

        Args:
            background: 캔버스 크기의 배경 이미지
            badges: 디코딩된 배지 (위치 포함)

        Returns:
            캔버스 크기의 RGBA 이미지
        """
        self._canvas.fill(background)
        self.rendered = 0

        for badge in badges:
            try:
                self._canvas.paste(badge.image, badge.position)
            except (ValueError, OSError) as e:
                logger.error("배지 합성 실패: %s (%s)", badge.badge_id, e)
                continue
            self.rendered += 1
            logger.debug("배지 합성: %s at (%d, %d)", badge.badge_id, *badge.position)

        return self._canvas.image

"""배지 위치 계산 모듈 — 각 배지가 캔버스의 어디에 놓일지 결정한다.

두 가지 방식이 있다.
  * LAYOUT: 프로필 카드의 배지 영역 HTML에 들어 있는 절대 좌표 (우선)
  * FORMULAIC: 배지 메타데이터의 xloc/yloc를 캔버스 높이로 접은 좌표 (대체)
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from bs4 import BeautifulSoup

from content.badges import BadgeInfo, LayoutEntry
from errors import LayoutEntryError

logger = logging.getLogger(__name__)

CANVAS_H = 100

_BADGE_ID_RE = re.compile(r"^badge-\d+-\d+$")
_LEFT_RE = re.compile(r"(?:^|;)\s*left\s*:\s*([^;]*?)\s*(?:;|$)", re.IGNORECASE)
_TOP_RE = re.compile(r"(?:^|;)\s*top\s*:\s*([^;]*?)\s*(?:;|$)", re.IGNORECASE)
_PX_RE = re.compile(r"^(-?\d+)px$", re.IGNORECASE)


class PositionSource(Enum):
    FORMULAIC = "formulaic"
    LAYOUT = "layout"


@dataclass(frozen=True)
class Placement:
    x: int
    y: int
    source: PositionSource


def _style_px(style: str, pattern: re.Pattern, badge_id: str, prop: str) -> int:
    """style 문자열에서 `<prop>:<N>px` 값을 정수로 읽는다."""
    match = pattern.search(style)
    if match is None:
        raise LayoutEntryError(badge_id, f"style에 {prop} 없음")
    value = _PX_RE.match(match.group(1))
    if value is None:
        raise LayoutEntryError(badge_id, f"{prop} 값이 숫자가 아님: {match.group(1)!r}")
    return int(value.group(1))


def parse_layout_markup(markup: str | None) -> list[LayoutEntry]:
    """배지 영역 HTML에서 배지별 절대 위치를 추출한다.

    id가 badge-<creator_id>-<index> 형태인 요소마다 style의 left/top(px)을 읽는다.
    left/top이 없거나 숫자가 아닌 요소는 경고 후 건너뛴다.
    """
    if not markup:
        return []

    soup = BeautifulSoup(markup, "html.parser")
    entries = []
    for element in soup.find_all(id=_BADGE_ID_RE):
        badge_id = element["id"]
        style = element.get("style") or ""
        try:
            x = _style_px(style, _LEFT_RE, badge_id, "left")
            y = _style_px(style, _TOP_RE, badge_id, "top")
        except LayoutEntryError as e:
            logger.warning("레이아웃 위치 추출 실패: %s", e)
            continue
        entries.append(LayoutEntry(badge_id=badge_id, x=x, y=y))

    logger.debug("레이아웃 위치 %d개 추출", len(entries))
    return entries


class PositionResolver:
    """배지의 캔버스 좌표를 결정한다."""

    def __init__(self, layout: list[LayoutEntry] | None = None, canvas_height: int = CANVAS_H):
        self._canvas_height = canvas_height
        self._entries: dict[str, LayoutEntry] = {}
        for entry in layout or []:
            self._entries[entry.badge_id] = entry

    @property
    def has_layout(self) -> bool:
        return bool(self._entries)

    def placement(self, badge: BadgeInfo) -> Placement:
        """레이아웃 항목이 있으면 그 좌표 그대로, 없으면 yloc를 캔버스 높이로 접는다."""
        entry = self._entries.get(badge.badge_id)
        if entry is not None:
            return Placement(entry.x, entry.y, PositionSource.LAYOUT)
        return Placement(badge.xloc, badge.yloc % self._canvas_height, PositionSource.FORMULAIC)

    def resolve(self, badge: BadgeInfo) -> tuple[int, int]:
        p = self.placement(badge)
        return p.x, p.y

"""배지 데이터 모듈 — 프로필 카드와 배지 메타데이터."""

from dataclasses import dataclass, field

from PIL import Image

from errors import ProfileFormatError

# badge_layout 항목에서 정수로 읽는 필드
_INT_FIELDS = (
    "creator_id", "creator_badge_index",
    "xloc", "yloc", "image_width", "image_height",
)


def _to_int(data: dict, key: str) -> int:
    """JSON 숫자 또는 숫자 문자열을 정수로 읽는다."""
    if key not in data:
        raise ProfileFormatError(f"배지 필드 누락: {key}")
    value = data[key]
    if isinstance(value, bool):
        raise ProfileFormatError(f"배지 필드 형식 오류: {key}={value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ProfileFormatError(f"배지 필드 형식 오류: {key}={value!r}") from e


@dataclass(frozen=True)
class BadgeInfo:
    """배지 메타데이터. xloc/yloc는 원본 레이아웃 좌표계 기준."""
    name: str
    creator_id: int
    creator_badge_index: int
    image_url: str
    image_width: int
    image_height: int
    xloc: int
    yloc: int

    @property
    def badge_id(self) -> str:
        return f"badge-{self.creator_id}-{self.creator_badge_index}"

    def __str__(self) -> str:
        return self.badge_id

    @classmethod
    def from_dict(cls, data: dict) -> "BadgeInfo":
        """badge_layout의 항목 하나로 BadgeInfo를 만든다."""
        if not isinstance(data, dict):
            raise ProfileFormatError(f"배지 항목이 객체가 아님: {data!r}")
        image_url = data.get("image_url")
        if not isinstance(image_url, str) or not image_url:
            raise ProfileFormatError("배지 필드 누락: image_url")
        ints = {key: _to_int(data, key) for key in _INT_FIELDS}
        return cls(name=str(data.get("name", "")), image_url=image_url, **ints)


@dataclass(frozen=True)
class LayoutEntry:
    """레이아웃 마크업에서 추출한 배지의 절대 픽셀 위치."""
    badge_id: str
    x: int
    y: int


@dataclass
class ProfileCard:
    """아바타 프로필 카드."""
    avatar_name: str
    cid: int
    badges: dict[str, BadgeInfo] = field(default_factory=dict)
    layout_markup: str | None = None        # 원본 배지 영역 HTML
    layout: list[LayoutEntry] | None = None  # 미리 파싱된 위치 목록

    def parsed_layout(self) -> list[LayoutEntry] | None:
        """위치 목록을 반환한다. 파싱된 목록 → 마크업 파싱 → None 순서."""
        if self.layout is not None:
            return self.layout
        if self.layout_markup:
            from renderer.layout import parse_layout_markup
            return parse_layout_markup(self.layout_markup)
        return None


@dataclass
class DecodedBadge:
    """디코딩된 배지 이미지와 캔버스 위 위치."""
    badge_id: str
    image: Image.Image          # RGBA
    position: tuple[int, int]
    source_format: str = ""

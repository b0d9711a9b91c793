"""배경 캔버스 생성 모듈 — 점선 격자 배경 + 타일 비트맵 배경 지원."""

import logging
import re
from pathlib import Path
from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)

SCREEN_W = 440
SCREEN_H = 100

# 기본 배경색/격자선 색
DEFAULT_GRID_COLOR = (0xEC, 0xEC, 0xEC, 0xFF)
DEFAULT_GRID_LINE_COLOR = (0xD4, 0xD4, 0xD4, 0xFF)

# 밝기 128 미만이면 격자선을 밝게, 이상이면 어둡게
LUMA_THRESHOLD = 128.0
LIGHTEN_OFFSET = 40
DARKEN_OFFSET = 30

# 격자 간격 / 점선 주기 / 점선 길이 / 선 두께
GRID_STEP = 20
DASH_PERIOD = 10
DASH_LENGTH = 5
LINE_WIDTH = 2

TILE_SIZE = 40
_HEX_RE = re.compile(r"[0-9a-fA-F]{6}")
_TILE_PATH = Path(__file__).parent.parent / "assets" / "backgrounds" / "tile.png"


def _clamp(value: int) -> int:
    return max(0, min(255, value))


def luminance(r: int, g: int, b: int) -> float:
    """ITU-R BT.601 가중치 밝기."""
    return 0.299 * r + 0.587 * g + 0.114 * b


def parse_grid_colors(hex_color: str | None) -> tuple[tuple, tuple]:
    """16진수 색상 문자열에서 (배경색, 격자선 색)을 계산한다.

    '#' 접두사는 있어도 없어도 된다. 형식이 잘못되면 기본값 쌍을 반환한다.
    """
    if not hex_color:
        return DEFAULT_GRID_COLOR, DEFAULT_GRID_LINE_COLOR

    color_str = hex_color[1:] if hex_color.startswith("#") else hex_color
    if not _HEX_RE.fullmatch(color_str):
        return DEFAULT_GRID_COLOR, DEFAULT_GRID_LINE_COLOR

    r, g, b = bytes.fromhex(color_str)
    if luminance(r, g, b) < LUMA_THRESHOLD:
        # 어두운 배경 → 밝은 격자선
        offset = LIGHTEN_OFFSET
    else:
        # 밝은 배경 → 어두운 격자선
        offset = -DARKEN_OFFSET
    line = (_clamp(r + offset), _clamp(g + offset), _clamp(b + offset), 0xFF)
    return (r, g, b, 0xFF), line


class BackgroundTileGenerator:
    """배지 캔버스의 배경을 생성한다."""

    def __init__(self, width: int = SCREEN_W, height: int = SCREEN_H,
                 tile_path: str | Path | None = None, tile_size: int = TILE_SIZE):
        self._width = width
        self._height = height
        self._tile_path = Path(tile_path) if tile_path else _TILE_PATH
        self._tile_size = tile_size
        self._tile: Image.Image | None = None

    def generate(self, accent_color_hex: str | None = None) -> Image.Image:
        """색상이 주어지면 격자 배경, 없으면 타일 배경을 만든다."""
        if accent_color_hex is not None:
            return self.grid(accent_color_hex)

        tile = self._load_tile()
        if tile is None:
            return self.grid(None)
        return self.tiled(tile)

    def grid(self, accent_color_hex: str | None) -> Image.Image:
        """배경색으로 채우고 20px 간격의 2px 점선 격자를 그린다."""
        fill, line = parse_grid_colors(accent_color_hex)
        img = Image.new("RGBA", (self._width, self._height), fill)
        draw = ImageDraw.Draw(img)

        # 세로 점선
        for x in range(0, self._width - 1, GRID_STEP):
            for y0 in range(0, self._height, DASH_PERIOD):
                y1 = min(y0 + DASH_LENGTH, self._height) - 1
                draw.rectangle([(x, y0), (x + LINE_WIDTH - 1, y1)], fill=line)

        # 가로 점선
        for y in range(0, self._height - 1, GRID_STEP):
            for x0 in range(0, self._width, DASH_PERIOD):
                x1 = min(x0 + DASH_LENGTH, self._width) - 1
                draw.rectangle([(x0, y), (x1, y + LINE_WIDTH - 1)], fill=line)

        return img

    def tiled(self, tile: Image.Image) -> Image.Image:
        """타일을 좌상단부터 행 우선으로 겹치지 않게 복사한다 (블렌딩 없음)."""
        img = Image.new("RGBA", (self._width, self._height))
        tw, th = tile.size
        for y in range(0, self._height, th):
            for x in range(0, self._width, tw):
                img.paste(tile, (x, y))
        return img

    def _load_tile(self) -> Image.Image | None:
        """타일 비트맵을 한 번만 로드한다. 실패하면 None."""
        if self._tile is not None:
            return self._tile
        try:
            with Image.open(self._tile_path) as src:
                tile = src.convert("RGBA")
        except (OSError, ValueError) as e:
            logger.warning("타일 배경 로드 실패: %s (%s), 격자 배경으로 대체", self._tile_path, e)
            return None

        size = (self._tile_size, self._tile_size)
        if tile.size != size:
            tile = tile.resize(size, Image.Resampling.NEAREST)
        # 투명 픽셀이 남지 않도록 불투명 배경에 합성
        opaque = Image.new("RGBA", size, DEFAULT_GRID_COLOR)
        self._tile = Image.alpha_composite(opaque, tile)
        logger.debug("타일 배경 로드: %s", self._tile_path.name)
        return self._tile

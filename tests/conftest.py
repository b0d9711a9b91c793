"""테스트 공용 헬퍼: 배지 메타데이터와 이미지 바이트 생성."""

from io import BytesIO

import pytest
from PIL import Image

from config import load_config
from content.badges import BadgeInfo

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
WHITE = (255, 255, 255)


def make_badge(creator_id: int = 100, index: int = 1, xloc: int = 0, yloc: int = 0,
               url: str | None = None) -> BadgeInfo:
    return BadgeInfo(
        name=f"Badge {creator_id}-{index}",
        creator_id=creator_id,
        creator_badge_index=index,
        image_url=url or f"https://example.test/{creator_id}/{index}.png",
        image_width=20,
        image_height=20,
        xloc=xloc,
        yloc=yloc,
    )


def image_bytes(color: tuple, size: tuple[int, int] = (20, 20), fmt: str = "PNG",
                mode: str = "RGBA") -> bytes:
    fill = color if mode != "RGBA" or len(color) == 4 else (*color, 255)
    buf = BytesIO()
    Image.new(mode, size, fill).save(buf, format=fmt)
    return buf.getvalue()


def gif_bytes(colors: list[tuple], size: tuple[int, int] = (20, 20)) -> bytes:
    """프레임마다 단색인 애니메이션 GIF."""
    frames = [Image.new("RGB", size, c) for c in colors]
    buf = BytesIO()
    frames[0].save(buf, format="GIF", save_all=True, append_images=frames[1:],
                   duration=100, loop=0)
    return buf.getvalue()


@pytest.fixture
def no_config_file(tmp_path, monkeypatch):
    """기본 설정 경로를 비어 있는 임시 디렉터리로 돌린다."""
    monkeypatch.setattr("config._CONFIG_PATH", tmp_path / "config.json")


@pytest.fixture
def config(no_config_file):
    """기본값만 있는 설정."""
    return load_config()

"""고정 크기 Pillow RGBA 캔버스 관리 모듈."""

from PIL import Image

# 출력 캔버스 크기
WIDTH = 440
HEIGHT = 100


class Canvas:
    """고정 크기 RGBA 캔버스. 생성 후 크기는 바뀌지 않는다."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        self._size = (width, height)
        self._image = Image.new("RGBA", self._size, (0, 0, 0, 255))

    @property
    def image(self) -> Image.Image:
        return self._image

    def clear(self, color: tuple = (0, 0, 0, 255)) -> None:
        """캔버스를 지정 색상으로 초기화한다."""
        self._image = Image.new("RGBA", self._size, color)

    def fill(self, background: Image.Image) -> None:
        """배경 이미지로 캔버스를 채운다 (크기가 다르면 좌상단 기준으로 자른다)."""
        if background.mode != "RGBA":
            background = background.convert("RGBA")
        self.clear()
        self._image.paste(background, (0, 0))

    def paste(self, layer: Image.Image, position: tuple = (0, 0)) -> None:
        """레이어를 캔버스 위에 합성한다 (알파 블렌딩). 캔버스 밖 픽셀은 버린다."""
        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        self._image = Image.alpha_composite(self._image, _place(layer, position, self._size))


def _place(layer: Image.Image, position: tuple, size: tuple[int, int]) -> Image.Image:
    """레이어를 캔버스 크기에 맞춰 지정 위치에 배치한다."""
    if layer.size == size and tuple(position) == (0, 0):
        return layer
    result = Image.new("RGBA", size, (0, 0, 0, 0))
    result.paste(layer, tuple(position))
    return result

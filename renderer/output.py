"""출력 모듈 — 확장자에 따라 PNG/JPEG로 저장한다."""

import logging
from pathlib import Path

from PIL import Image

from errors import EncodeError, OutputFormatError

logger = logging.getLogger(__name__)

_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}

JPEG_QUALITY = 95


def output_format(path: str | Path) -> str:
    """출력 경로의 확장자로 Pillow 포맷 이름을 결정한다."""
    suffix = Path(path).suffix.lower()
    fmt = _FORMATS.get(suffix)
    if fmt is None:
        raise OutputFormatError(
            f"지원하지 않는 출력 확장자: {path!s} (png, jpg, jpeg만 가능)"
        )
    return fmt


def write_canvas(image: Image.Image, path: str | Path) -> Path:
    """캔버스를 파일로 저장하고 경로를 반환한다."""
    path = Path(path)
    fmt = output_format(path)
    try:
        if fmt == "JPEG":
            image.convert("RGB").save(path, format=fmt, quality=JPEG_QUALITY)
        else:
            image.save(path, format=fmt)
    except (OSError, ValueError) as e:
        raise EncodeError(f"이미지 저장 실패: {path} ({e})") from e
    logger.info("이미지 저장: %s (%s %dx%d)", path, fmt, image.width, image.height)
    return path

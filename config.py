"""설정 파일 로더 모듈."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from errors import ConfigError

# 기본 설정 경로
_CONFIG_PATH = Path(__file__).parent / "config.json"

# 기본값 — config.json에 누락된 키가 있을 때 사용
_DEFAULTS = {
    "canvas": {
        "width": 440,
        "height": 100,
    },
    "background": {
        "grid_color": None,     # None이면 타일 배경
        "tile_path": None,      # None이면 assets/backgrounds/tile.png
        "tile_size": 40,
    },
    "fetch": {
        "concurrency": "auto",
    },
    "api": {
        "avatar_card_url": "https://www.imvu.com/api/avatarcard.php",
        "user_lookup_url": "https://api.imvu.com/users",
        "timeout_sec": 10,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s [%(name)s] %(message)s",
    },
}

# 로그가 많은 외부 라이브러리
_QUIET_LOGGERS = ("aiohttp", "PIL")


def _deep_merge(base: dict, override: dict) -> dict:
    """base 딕셔너리에 override 값을 병합한다 (깊은 병합)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Path | None = None) -> dict:
    """설정 파일을 읽어 딕셔너리로 반환한다.

    기본 경로에 파일이 없으면 기본값을 사용한다. 직접 지정한 경로가 없거나
    JSON이 아니면 ConfigError.
    """
    if path is not None and not Path(path).exists():
        raise ConfigError(f"설정 파일 없음: {path}")
    config_path = Path(path) if path is not None else _CONFIG_PATH
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                user_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigError(f"설정 파일을 읽을 수 없음: {config_path} ({e})") from e
        if not isinstance(user_config, dict):
            raise ConfigError(f"설정 파일 최상위는 객체여야 함: {config_path}")
        return _deep_merge(_DEFAULTS, user_config)
    return _deep_merge(_DEFAULTS, {})


@dataclass
class LoggingConfig:
    """시작 시 한 번 적용하는 로깅 설정."""
    level: int = logging.INFO
    fmt: str = _DEFAULTS["logging"]["format"]
    quiet_loggers: tuple[str, ...] = _QUIET_LOGGERS

    @classmethod
    def from_config(cls, config: dict, verbose: bool = False) -> "LoggingConfig":
        section = config.get("logging", {})
        level = logging.DEBUG if verbose else logging.getLevelName(
            str(section.get("level", "INFO")).upper()
        )
        if not isinstance(level, int):
            level = logging.INFO
        return cls(level=level, fmt=section.get("format", cls.fmt))

    def apply(self) -> None:
        logging.basicConfig(level=self.level, format=self.fmt, force=True)
        for name in self.quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)

"""예외 분류 모듈 — 실행 중단(치명적)과 배지 단위 건너뛰기를 구분한다."""


class BadgeCanvasError(Exception):
    """badge-canvas 예외의 최상위 클래스."""


# ---------------------------------------------------------------------------
# 치명적 오류: 실행 전체를 중단한다
# ---------------------------------------------------------------------------

class FatalError(BadgeCanvasError):
    """실행을 중단해야 하는 오류."""


class ProfileLookupError(FatalError):
    """아바타 이름 → cid 변환 또는 프로필 카드 요청 실패."""


class ProfileFormatError(FatalError):
    """프로필 카드 JSON에 필요한 필드가 없거나 형식이 잘못됨."""


class OutputFormatError(FatalError):
    """지원하지 않는 출력 파일 확장자."""


class ConfigError(FatalError):
    """설정 파일을 읽을 수 없음."""


class EncodeError(FatalError):
    """캔버스 이미지를 파일로 저장하지 못함."""


# ---------------------------------------------------------------------------
# 정상 조기 종료
# ---------------------------------------------------------------------------

class NothingToRender(BadgeCanvasError):
    """프로필에 배지가 하나도 없음. 오류가 아니라 조기 종료 신호."""


# ---------------------------------------------------------------------------
# 배지 단위 오류: 로그만 남기고 해당 배지를 건너뛴다
# ---------------------------------------------------------------------------

class SkippableError(BadgeCanvasError):
    """배지 하나에만 영향을 주는 오류."""

    def __init__(self, badge_id: str, reason: str, image_format: str | None = None):
        super().__init__(f"{badge_id}: {reason}")
        self.badge_id = badge_id
        self.reason = reason
        self.image_format = image_format


class DownloadError(SkippableError):
    """배지 이미지 다운로드 실패."""


class UnsupportedFormatError(SkippableError):
    """지원하지 않는 이미지 포맷."""


class DecodeError(SkippableError):
    """이미지 디코딩 실패."""


class LayoutEntryError(SkippableError):
    """레이아웃 마크업에서 배지 위치(left/top)를 추출하지 못함."""

"""IMVU API 모듈 — 아바타 이름 → cid 변환, 프로필 카드(배지 목록) 조회."""

import asyncio
import logging
import re

import aiohttp

from content.badges import BadgeInfo, ProfileCard
from errors import ProfileFormatError, ProfileLookupError

logger = logging.getLogger(__name__)

AVATAR_CARD_URL = "https://www.imvu.com/api/avatarcard.php"
USER_LOOKUP_URL = "https://api.imvu.com/users"

# 프로필 카드 JSON 키
_AVNAME_KEY = "avname"
_BADGE_LAYOUT_KEY = "badge_layout"
_LAYOUT_MARKUP_KEY = "badge_area_html"

_USER_KEY_RE = re.compile(r"user-(\d+)$")


# ---------------------------------------------------------------------------
# 응답 파싱
# ---------------------------------------------------------------------------

def parse_profile_card(payload: object, cid: int) -> ProfileCard:
    """avatarcard.php 응답을 ProfileCard로 검증·변환한다.

    badge_layout이 없거나 빈 배열(PHP 빈 배열)이면 배지 없음으로 처리한다.
    """
    if not isinstance(payload, dict):
        raise ProfileFormatError(f"프로필 카드 응답이 객체가 아님 (cid={cid})")

    avname = payload.get(_AVNAME_KEY)
    if not isinstance(avname, str) or not avname:
        raise ProfileFormatError(f"아바타 이름 없음 (cid={cid})")

    layout = payload.get(_BADGE_LAYOUT_KEY)
    badges = {}
    if isinstance(layout, dict):
        for key, value in layout.items():
            badges[key] = BadgeInfo.from_dict(value)
    elif layout not in (None, [], ""):
        raise ProfileFormatError(f"badge_layout 형식 오류 (cid={cid}): {type(layout).__name__}")

    markup = payload.get(_LAYOUT_MARKUP_KEY)
    if not isinstance(markup, str) or not markup.strip():
        markup = None

    return ProfileCard(avatar_name=avname, cid=cid, badges=badges, layout_markup=markup)


def parse_user_lookup(payload: object, avatar_name: str) -> int:
    """users?username= 응답에서 cid(legacy_cid)를 찾는다."""
    if not isinstance(payload, dict):
        raise ProfileLookupError(f"사용자 조회 응답이 객체가 아님: {avatar_name}")

    denormalized = payload.get("denormalized") or {}
    if not isinstance(denormalized, dict):
        denormalized = {}

    for key, record in denormalized.items():
        data = record.get("data") if isinstance(record, dict) else None
        if not isinstance(data, dict):
            continue
        cid = data.get("legacy_cid")
        if cid is not None:
            try:
                return int(cid)
            except (TypeError, ValueError):
                continue
        match = _USER_KEY_RE.search(key)
        if match and "username" in data:
            return int(match.group(1))

    raise ProfileLookupError(f"아바타를 찾을 수 없음: {avatar_name}")


# ---------------------------------------------------------------------------
# 클라이언트
# ---------------------------------------------------------------------------

class ImvuClient:
    """IMVU 공개 API에서 사용자와 프로필 카드를 조회한다."""

    def __init__(self, session: aiohttp.ClientSession,
                 avatar_card_url: str = AVATAR_CARD_URL,
                 user_lookup_url: str = USER_LOOKUP_URL,
                 timeout_sec: float = 10):
        self._session = session
        self._avatar_card_url = avatar_card_url
        self._user_lookup_url = user_lookup_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)

    @classmethod
    def from_config(cls, session: aiohttp.ClientSession, config: dict) -> "ImvuClient":
        return cls(
            session,
            avatar_card_url=config.get("avatar_card_url", AVATAR_CARD_URL),
            user_lookup_url=config.get("user_lookup_url", USER_LOOKUP_URL),
            timeout_sec=config.get("timeout_sec", 10),
        )

    async def resolve_user_id(self, avatar_name: str) -> int:
        """아바타 이름으로 cid를 조회한다."""
        payload = await self._get_json(self._user_lookup_url, {"username": avatar_name})
        cid = parse_user_lookup(payload, avatar_name)
        logger.info("아바타 %s → cid %d", avatar_name, cid)
        return cid

    async def fetch_profile_card(self, cid: int) -> ProfileCard:
        """cid의 프로필 카드를 가져온다."""
        payload = await self._get_json(self._avatar_card_url, {"cid": str(cid)})
        return parse_profile_card(payload, cid)

    async def _get_json(self, url: str, params: dict) -> object:
        """GET 요청 후 JSON을 반환한다. 네트워크/JSON 오류는 ProfileLookupError."""
        try:
            async with self._session.get(url, params=params, timeout=self._timeout) as resp:
                resp.raise_for_status()
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProfileLookupError(f"API 호출 실패: {url} ({e})") from e

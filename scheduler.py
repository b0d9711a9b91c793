"""동시 실행 관리 모듈 — 배지 작업을 세마포어로 제한하여 병렬 실행한다."""

import asyncio
import logging
import os
from collections.abc import Sequence

from content.badges import BadgeInfo, DecodedBadge
from errors import SkippableError
from imvu.fetcher import FetchDecodeWorker

logger = logging.getLogger(__name__)

AUTO = "auto"


def resolve_concurrency(value: int | str | None) -> int:
    """동시 실행 수를 결정한다. 'auto'/None이면 CPU 코어 수."""
    default = os.cpu_count() or 1
    if value is None or value == AUTO:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        logger.warning("잘못된 동시 실행 수: %r, 기본값(%d) 사용", value, default)
        return default
    if limit < 1:
        logger.warning("동시 실행 수는 1 이상이어야 함: %d, 기본값(%d) 사용", limit, default)
        return default
    return limit


class BoundedScheduler:
    """배지마다 작업 하나를 만들고 동시에 limit개까지만 실행한다."""

    def __init__(self, concurrency: int | str | None = AUTO):
        self.limit = resolve_concurrency(concurrency)
        self._in_flight = 0
        self.peak_in_flight = 0

    async def run_all(
        self,
        badges: Sequence[BadgeInfo],
        worker: FetchDecodeWorker,
    ) -> list[DecodedBadge | SkippableError]:
        """모든 배지를 처리하고 완료 순서대로 결과를 반환한다.

        한 작업의 실패가 다른 작업을 취소하거나 막지 않는다.
        """
        semaphore = asyncio.Semaphore(self.limit)
        logger.info("배지 %d개 처리 시작 (동시 실행 %d)", len(badges), self.limit)

        async def guarded(badge: BadgeInfo) -> DecodedBadge | SkippableError:
            async with semaphore:
                self._in_flight += 1
                self.peak_in_flight = max(self.peak_in_flight, self._in_flight)
                try:
                    return await worker.process(badge)
                except Exception as e:
                    logger.error("배지 작업 실패: %s (%s)", badge.badge_id, e)
                    return SkippableError(badge.badge_id, f"작업 실패: {e}")
                finally:
                    self._in_flight -= 1

        tasks = [asyncio.ensure_future(guarded(badge)) for badge in badges]
        results = []
        for next_done in asyncio.as_completed(tasks):
            results.append(await next_done)
        return results

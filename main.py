"""메인 — 아바타 배지를 모아 하나의 캔버스 이미지로 저장한다."""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from config import LoggingConfig, load_config
from content.background import BackgroundTileGenerator
from content.badges import DecodedBadge, ProfileCard
from errors import FatalError, NothingToRender, SkippableError
from imvu.api import ImvuClient
from imvu.fetcher import Fetch, FetchDecodeWorker, http_fetcher
from renderer.layers import BadgeCompositor
from renderer.layout import PositionResolver
from renderer.output import output_format, write_canvas
from scheduler import BoundedScheduler

logger = logging.getLogger("badge_canvas")


@dataclass
class RenderSummary:
    """실행 결과 요약."""
    avatar_name: str
    found: int
    rendered: int = 0
    output: Path | None = None
    skipped: list[SkippableError] = field(default_factory=list)


def build_parser() -> argparse.ArgumentParser:
    """명령행 인자 파서를 만든다."""
    parser = argparse.ArgumentParser(
        prog="badge-canvas",
        description="IMVU 아바타의 배지를 하나의 캔버스 이미지로 합성한다.",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("-c", "--cid", type=int, help="사용자 ID (cid)")
    target.add_argument("-a", "--avatar-name", help="아바타 이름")
    parser.add_argument("-o", "--output", help="출력 파일 (.png/.jpg/.jpeg). 기본: canvas-<아바타 이름>.png")
    parser.add_argument("-g", "--grid-color", help="격자 배경색 16진수 (예: 'ececec'). 없으면 타일 배경")
    parser.add_argument("-j", "--concurrency", help="동시 다운로드 수 또는 'auto' (CPU 코어 수)")
    parser.add_argument("-v", "--verbose", action="store_true", help="상세 로그 출력")
    parser.add_argument("--config", type=Path, help="설정 파일 경로 (JSON)")
    return parser


def default_output_name(avatar_name: str) -> str:
    return f"canvas-{avatar_name}.png"


async def render_profile(
    card: ProfileCard,
    output: str | Path,
    fetch: Fetch,
    config: dict,
    grid_color: str | None = None,
    concurrency: int | str | None = None,
) -> RenderSummary:
    """프로필 카드의 배지를 다운로드·합성하여 output에 저장한다.

    배지가 하나도 없으면 NothingToRender를 발생시키고 파일을 만들지 않는다.
    """
    output_format(output)
    if not card.badges:
        raise NothingToRender(f"배지 없음: {card.avatar_name}")

    canvas_cfg = config["canvas"]
    bg_cfg = config["background"]
    width, height = canvas_cfg["width"], canvas_cfg["height"]

    summary = RenderSummary(avatar_name=card.avatar_name, found=len(card.badges))
    logger.info("배지 %d개 발견", summary.found)

    # 배경
    generator = BackgroundTileGenerator(
        width=width, height=height,
        tile_path=bg_cfg.get("tile_path"),
        tile_size=bg_cfg.get("tile_size", 40),
    )
    background = generator.generate(grid_color if grid_color is not None else bg_cfg.get("grid_color"))

    # 다운로드·디코딩 (병렬)
    resolver = PositionResolver(card.parsed_layout(), canvas_height=height)
    worker = FetchDecodeWorker(fetch, resolver)
    scheduler = BoundedScheduler(
        concurrency if concurrency is not None else config["fetch"].get("concurrency", "auto")
    )
    outcomes = await scheduler.run_all(list(card.badges.values()), worker)

    decoded = [o for o in outcomes if isinstance(o, DecodedBadge)]
    summary.skipped = [o for o in outcomes if isinstance(o, SkippableError)]

    # 합성 (순차)
    compositor = BadgeCompositor(width, height)
    frame = compositor.compose(background, decoded)
    summary.rendered = compositor.rendered
    summary.output = write_canvas(frame, output)

    logger.info("배지 %d/%d개 렌더링 (건너뜀 %d)", summary.rendered, summary.found, len(summary.skipped))
    return summary


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except FatalError as e:
        print(f"오류: {e}", file=sys.stderr)
        return 1
    LoggingConfig.from_config(config, verbose=args.verbose).apply()
    logger.debug("상세 로그 활성화")

    try:
        # 출력 경로는 네트워크 작업 전에 확인
        if args.output:
            output_format(args.output)

        async with aiohttp.ClientSession() as session:
            client = ImvuClient.from_config(session, config["api"])
            if args.avatar_name:
                cid = await client.resolve_user_id(args.avatar_name)
            else:
                cid = args.cid

            card = await client.fetch_profile_card(cid)
            logger.info("아바타 이름: %s", card.avatar_name)

            output = args.output or default_output_name(card.avatar_name)
            summary = await render_profile(
                card, output, http_fetcher(session), config,
                grid_color=args.grid_color,
                concurrency=args.concurrency,
            )
    except NothingToRender as e:
        logger.info("%s, 저장할 이미지 없음", e)
        return 0
    except FatalError as e:
        logger.error("%s", e)
        return 1

    print(f"{summary.avatar_name}: 배지 {summary.rendered}/{summary.found}개 → {summary.output}")
    return 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logging.info("종료")
        sys.exit(130)


if __name__ == "__main__":
    cli()

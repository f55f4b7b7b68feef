"""RetroBoard CLI entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

env_file = Path.cwd() / ".env"
load_dotenv(env_file)

from retroboard import __version__
from retroboard.config import Settings, get_settings
from retroboard.presentation import build_rows
from retroboard.ranking import RankMode
from retroboard.services import (
    LeaderboardService,
    NominationsService,
    group_by_platform,
    sync_monthly_progress,
)
from retroboard.services.retroachievements import (
    RetroAchievementsAPIError,
    create_retroachievements_client,
)
from retroboard.storage.cache import TTLCache
from retroboard.storage.mongo import close_db, get_database, init_db
from retroboard.storage.repository import StatsRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


async def _with_repository(settings: Settings, fn):
    """Run ``fn(repository)`` with a connected database."""
    await init_db(settings.mongodb)
    try:
        return await fn(StatsRepository(get_database()))
    finally:
        await close_db()


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "retroboard.api.server:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_check_db(args: argparse.Namespace) -> int:
    """Print document counts for the dashboard collections."""
    settings = get_settings()
    try:
        counts = asyncio.run(
            _with_repository(settings, lambda repo: repo.count_collections())
        )
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        return 1

    for name, count in counts.items():
        print(f"  {name}: {count} documents")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print a ranked leaderboard."""
    settings = get_settings()
    mode = RankMode(args.mode)

    async def load(repository: StatsRepository):
        service = LeaderboardService(
            repository=repository,
            cache=TTLCache(ttl_seconds=0),
            config=settings.leaderboard,
            site_url=settings.retroachievements.site_url,
        )
        if mode is RankMode.MONTHLY:
            return await service.build_monthly_leaderboard()
        return await service.build_yearly_leaderboard()

    try:
        board = asyncio.run(_with_repository(settings, load))
    except Exception as e:
        logger.error(f"Failed to build {mode.value} leaderboard: {e}")
        return 1

    if mode is RankMode.MONTHLY:
        print(f"\n{board.game_info.title}")
    for row in build_rows(board.leaderboard, mode, settings.retroachievements.site_url):
        print(f"  {row.rank_label:>4}  {row.username:<20} {'  '.join(row.stat_lines)}")
    if board.additional_participants:
        print(f"\n  Also participating: {', '.join(board.additional_participants)}")
    return 0


def cmd_nominations(args: argparse.Namespace) -> int:
    """Print current nominations grouped by platform."""
    settings = get_settings()
    try:
        response = asyncio.run(
            _with_repository(
                settings, lambda repo: NominationsService(repo).get_nominations()
            )
        )
    except Exception as e:
        logger.error(f"Failed to load nominations: {e}")
        return 1

    print(f"\nNominations {'open' if response.is_open else 'closed'}")
    for group in group_by_platform(response.nominations):
        print(f"\n{group.full_name}")
        for nomination in group.nominations:
            print(f"  - {nomination.game} ({nomination.discord_username})")
    return 0


def cmd_sync_progress(args: argparse.Namespace) -> int:
    """Pull challenge progress from RetroAchievements into MongoDB."""
    settings = get_settings()
    ra = settings.retroachievements
    if not ra.api_key:
        logger.error("RETROACHIEVEMENTS__API_KEY is not configured")
        return 1

    async def sync(repository: StatsRepository) -> int:
        async with create_retroachievements_client(
            username=ra.username,
            api_key=ra.api_key,
            base_url=ra.base_url,
            timeout_seconds=ra.timeout_seconds,
            max_retries=ra.max_retries,
        ) as client:
            return await sync_monthly_progress(
                repository, client, args.game_id, args.period
            )

    try:
        updated = asyncio.run(_with_repository(settings, sync))
    except RetroAchievementsAPIError as e:
        logger.error(f"RetroAchievements request failed: {e}")
        return 1

    print(f"\nUpdated progress for {updated} users")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retroboard",
        description="RetroAchievements community leaderboards and nominations",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    check_db = subparsers.add_parser("check-db", help="Check the database connection")
    check_db.set_defaults(func=cmd_check_db)

    show = subparsers.add_parser("show", help="Print a leaderboard")
    show.add_argument("mode", choices=[m.value for m in RankMode])
    show.set_defaults(func=cmd_show)

    nominations = subparsers.add_parser("nominations", help="Print nominations")
    nominations.set_defaults(func=cmd_nominations)

    sync = subparsers.add_parser(
        "sync-progress", help="Pull monthly progress from RetroAchievements"
    )
    sync.add_argument("--game-id", type=int, required=True)
    sync.add_argument("--period", default=None, help="Month key (YYYY-MM)")
    sync.set_defaults(func=cmd_sync_progress)

    return parser


def main() -> int:
    args = build_parser().parse_args()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

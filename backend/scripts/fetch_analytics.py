import argparse
import asyncio
import json
import sys

from loguru import logger

from app.core.config import get_settings
from app.services.analytics_service import AnalyticsService
from codeforces import CodeforcesClient, CodeforcesError

SECTIONS = (
    "report",
    "profile",
    "ratings",
    "submissions",
    "difficulty",
    "activity",
    "heatmap",
    "consistency",
    "badges",
    "contests",
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print Codeforces analytics for a handle as JSON")
    parser.add_argument("handle", nargs="?", help="Codeforces handle (not needed for 'contests')")
    parser.add_argument(
        "--section",
        choices=SECTIONS,
        default="report",
        help="Which view to compute (default: the full report)",
    )
    parser.add_argument("--days", type=int, default=None, help="Heatmap window in days")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    args = parser.parse_args(argv)
    if args.section != "contests" and not args.handle:
        parser.error(f"a handle is required for section '{args.section}'")
    return args


async def _compute(service: AnalyticsService, args: argparse.Namespace):
    if args.section == "contests":
        return await service.upcoming_contests()
    if args.section == "heatmap":
        return await service.heatmap(args.handle, days=args.days)
    return await getattr(service, args.section)(args.handle)


def _to_jsonable(value):
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value.model_dump(by_alias=True)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    async with CodeforcesClient.from_settings(settings) as client:
        service = AnalyticsService(client, settings=settings)
        try:
            result = await _compute(service, args)
        except CodeforcesError as exc:
            logger.error("Failed to compute {}: {}", args.section, exc)
            return 1
    print(json.dumps(_to_jsonable(result), indent=args.indent))
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python
"""
Recalculate player, team and season statistics from the command line.

Usage:
    python scripts/recalculate_statistics.py [--season ID] [--player ID] [--prod]

Examples:
    python scripts/recalculate_statistics.py
    python scripts/recalculate_statistics.py --season 2025-2026
    python scripts/recalculate_statistics.py --player 6f1c... --prod
"""

import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import asyncio

import certifi
from motor.motor_asyncio import AsyncIOMotorClient

from config import settings
from exceptions import ClubException
from logging_config import logger
from services.stats_service import StatsService


async def recalculate_statistics(
    season_id: str | None, player_id: str | None, use_prod: bool = False
) -> int:
    client = AsyncIOMotorClient(settings.get_db_url(use_prod), tlsCAFile=certifi.where())
    db = client[settings.get_db_name(use_prod)]

    try:
        result = await StatsService(db).recalculate(season_id=season_id, player_id=player_id)
    except ClubException as e:
        logger.error(f"Recalculation failed: {e.message}", extra={"details": e.details})
        return 1
    finally:
        client.close()

    print(
        f"✓ Recalculated statistics: {result.playersUpdated} players, "
        f"{result.seasonsUpdated} seasons"
    )
    if result.warning:
        print(f"⚠ {result.warning}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Recalculate club statistics")
    parser.add_argument("--season", help="Only recalculate this season ID")
    parser.add_argument("--player", help="Only recalculate this player ID")
    parser.add_argument("--prod", action="store_true", help="Use production database")
    args = parser.parse_args()

    logger.info(f"Recalculating statistics on {'PRODUCTION' if args.prod else 'DEVELOPMENT'}")
    return asyncio.run(recalculate_statistics(args.season, args.player, args.prod))


if __name__ == "__main__":
    sys.exit(main())

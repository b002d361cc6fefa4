"""
Document Store - key/value JSON blobs on top of MongoDB

Every logical store ("players", "fixtures", "player-statistics", ...) is a
MongoDB collection whose documents look like:

    {"_id": "<key>", "value": <JSON>, "updatedAt": <datetime>}

Callers only see `get(collection, key)` and `put(collection, key, value)`.
"""

from datetime import datetime
from typing import Any

from exceptions import DatabaseOperationException
from logging_config import logger
from services.performance_monitor import monitor_query

PLAYERS_COLLECTION = "players"
SEASONS_COLLECTION = "seasons"
FIXTURES_COLLECTION = "fixtures"
CORE_ROSTER_COLLECTION = "core-roster"
AVAILABILITY_COLLECTION = "fixture-availability"
STATISTICS_COLLECTION = "player-statistics"

PLAYERS_KEY = "players-all"
SEASONS_KEY = "seasons-list"


def core_roster_key(season_id: str) -> str:
    return f"core-roster-{season_id}"


def fixtures_key(season_id: str) -> str:
    return f"fixtures-{season_id}"


def availability_index_key(season_id: str) -> str:
    return f"availability-index-{season_id}"


def availability_key(fixture_id: str) -> str:
    return f"availability-{fixture_id}"


def player_stats_key(player_id: str) -> str:
    return f"player-stats-{player_id}"


def team_stats_key(team_name: str, season_id: str) -> str:
    return f"team-stats-{team_name}-{season_id}"


def season_stats_key(season_id: str) -> str:
    return f"season-stats-{season_id}"


class DocumentStore:
    """Key/value accessor for JSON documents"""

    def __init__(self, db):
        self.db = db

    @monitor_query("document_store_get")
    async def get(self, collection: str, key: str) -> Any | None:
        """
        Fetch the JSON value stored under `key`.

        Returns:
            The stored value, or None when the key is absent

        Raises:
            DatabaseOperationException: If the read fails
        """
        try:
            document = await self.db[collection].find_one({"_id": key})
        except Exception as e:
            raise DatabaseOperationException(
                operation="get",
                collection=collection,
                details={"key": key, "error": str(e)},
            ) from e

        if document is None:
            logger.debug(f"No document for key '{key}' in '{collection}'")
            return None
        return document.get("value")

    @monitor_query("document_store_put")
    async def put(self, collection: str, key: str, value: Any) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Raises:
            DatabaseOperationException: If the write fails or is not acknowledged
        """
        try:
            result = await self.db[collection].replace_one(
                {"_id": key},
                {"_id": key, "value": value, "updatedAt": datetime.now()},
                upsert=True,
            )
        except Exception as e:
            raise DatabaseOperationException(
                operation="put",
                collection=collection,
                details={"key": key, "error": str(e)},
            ) from e

        if not result.acknowledged:
            raise DatabaseOperationException(
                operation="put",
                message=f"Write of '{key}' was not acknowledged",
                collection=collection,
                details={"key": key},
            )

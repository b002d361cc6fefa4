"""
Statistics Service - availability and selection statistics

A run loads every season's roster, fixtures and availability records once,
computes per-player statistics, rolls them up into team and season summaries,
and overwrites the derived documents in the statistics store.

Core players are measured against every past fixture of their team; non-core
players only against the fixtures they were selected for.
"""

import asyncio
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ValidationError

from config import settings
from exceptions import (
    DatabaseOperationException,
    ResourceNotFoundException,
    StatsCalculationException,
    ValidationException,
)
from logging_config import logger
from models.availability import AvailabilityIndexEntry, FixtureAvailability
from models.fixtures import Fixture
from models.players import Player
from models.roster import CoreRosterAssignment
from models.seasons import Season
from models.statistics import (
    CareerStats,
    ClubSeasonStats,
    PlayerStatistics,
    SeasonData,
    SeasonStatisticsSummary,
    SeasonStats,
    StatisticsCalculateResponse,
    StatisticsResult,
    TeamPlayerStats,
    TeamSeasonStats,
    TeamStatisticsSummary,
    TeamSummaryEntry,
)
from services.document_store import (
    AVAILABILITY_COLLECTION,
    CORE_ROSTER_COLLECTION,
    FIXTURES_COLLECTION,
    PLAYERS_COLLECTION,
    PLAYERS_KEY,
    SEASONS_COLLECTION,
    SEASONS_KEY,
    STATISTICS_COLLECTION,
    DocumentStore,
    availability_index_key,
    availability_key,
    core_roster_key,
    fixtures_key,
    player_stats_key,
    season_stats_key,
    team_stats_key,
)
from services.performance_monitor import log_performance
from utils import to_local_naive


# ==================== RATE HELPERS ====================

def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half-up, exact for non-negative integers"""
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_rate(numerator: int, denominator: int) -> int:
    """Percentage rounded half-up; 0 when there is nothing to divide by"""
    if denominator <= 0:
        return 0
    return round_half_up(100 * numerator, denominator)


def average_rate(rates: list[int]) -> int:
    if not rates:
        return 0
    return round_half_up(sum(rates), len(rates))


def _apply_rates(stats: TeamSeasonStats) -> TeamSeasonStats:
    stats.availabilityRate = calculate_rate(stats.timesAvailable, stats.totalFixtures)
    stats.selectionRate = calculate_rate(stats.gamesPlayed, stats.timesAvailable)
    return stats


# ==================== PER-PLAYER ACCUMULATION ====================

def core_teams_for(player_id: str, season_data: SeasonData) -> set[str]:
    season_id = season_data.season.id
    return {
        assignment.teamName
        for assignment in season_data.coreRoster
        if assignment.playerId == player_id
        and assignment.isCore
        and assignment.seasonId in (None, season_id)
    }


def count_past_fixtures(fixtures: Iterable[Fixture], team_name: str, now: datetime) -> int:
    return sum(1 for fixture in fixtures if fixture.team == team_name and fixture.is_past(now))


def calculate_player_season_stats(
    player_id: str, season_data: SeasonData, now: datetime
) -> Optional[SeasonStats]:
    """
    Accumulate one player's statistics for one season.

    Returns None when the player has no availability response anywhere in the
    season; such a season does not count for the player at all.
    """
    if not season_data.fixtures:
        return None

    core_teams = core_teams_for(player_id, season_data)
    fixtures_by_id = {fixture.id: fixture for fixture in season_data.fixtures}
    team_stats: dict[str, TeamSeasonStats] = {}
    participated = False

    for fixture_id, availability in season_data.availability.items():
        record = availability.record_for(player_id)
        if record is None or not record.has_response:
            continue
        participated = True

        fixture = fixtures_by_id.get(fixture_id)
        if fixture is None or not fixture.is_past(now):
            continue

        stats = team_stats.setdefault(fixture.team, TeamSeasonStats())
        if fixture.team in core_teams:
            # denominator is filled in below from the full fixture list
            if record.wasAvailable:
                stats.timesAvailable += 1
            if record.wasSelected:
                stats.gamesPlayed += 1
        elif record.wasSelected:
            stats.totalFixtures += 1
            stats.timesAvailable += 1
            stats.gamesPlayed += 1

    if not participated:
        return None

    for team_name in core_teams:
        stats = team_stats.setdefault(team_name, TeamSeasonStats())
        stats.totalFixtures = count_past_fixtures(season_data.fixtures, team_name, now)

    club_stats = ClubSeasonStats()
    for stats in team_stats.values():
        _apply_rates(stats)
        club_stats.totalFixtures += stats.totalFixtures
        club_stats.timesAvailable += stats.timesAvailable
        club_stats.gamesPlayed += stats.gamesPlayed
    _apply_rates(club_stats)

    return SeasonStats(
        seasonName=season_data.season.name,
        teamStats={team_name: team_stats[team_name] for team_name in sorted(team_stats)},
        clubStats=club_stats,
    )


def calculate_career_stats(season_stats: Iterable[SeasonStats]) -> CareerStats:
    """Sum club-wide totals over the seasons a player took part in and recompute the rates"""
    career = CareerStats()
    for stats in season_stats:
        career.totalSeasons += 1
        career.totalFixtures += stats.clubStats.totalFixtures
        career.totalTimesAvailable += stats.clubStats.timesAvailable
        career.totalGamesPlayed += stats.clubStats.gamesPlayed

    career.careerAvailabilityRate = calculate_rate(career.totalTimesAvailable, career.totalFixtures)
    career.careerSelectionRate = calculate_rate(career.totalGamesPlayed, career.totalTimesAvailable)
    return career


def calculate_player_statistics(
    player: Player, seasons_data: list[SeasonData], now: datetime
) -> PlayerStatistics:
    season_stats: dict[str, SeasonStats] = {}
    for season_data in seasons_data:
        stats = calculate_player_season_stats(player.id, season_data, now)
        if stats is not None:
            season_stats[season_data.season.id] = stats

    return PlayerStatistics(
        playerId=player.id,
        playerName=player.fullName,
        seasonStats=season_stats,
        careerStats=calculate_career_stats(season_stats.values()),
        lastUpdated=now.isoformat(),
    )


# ==================== SUMMARY ROLL-UP ====================

def build_team_summaries(
    player_statistics: list[PlayerStatistics], seasons_data: list[SeasonData]
) -> list[TeamStatisticsSummary]:
    """One summary per (team, season) with at least one player entry"""
    summaries: list[TeamStatisticsSummary] = []

    for season_data in seasons_data:
        season = season_data.season
        season_summaries: dict[str, TeamStatisticsSummary] = {}

        for player_stats in player_statistics:
            stats_for_season = player_stats.seasonStats.get(season.id)
            if stats_for_season is None:
                continue
            for team_name, team_stats in stats_for_season.teamStats.items():
                if team_name not in season_summaries:
                    season_summaries[team_name] = TeamStatisticsSummary(
                        seasonId=season.id,
                        seasonName=season.name,
                        teamName=team_name,
                        totalFixtures=sum(
                            1 for fixture in season_data.fixtures if fixture.team == team_name
                        ),
                    )
                season_summaries[team_name].playerStats.append(
                    TeamPlayerStats(
                        playerId=player_stats.playerId,
                        playerName=player_stats.playerName,
                        stats=team_stats,
                    )
                )

        for team_name in sorted(season_summaries):
            summary = season_summaries[team_name]
            summary.totalPlayers = len(summary.playerStats)
            summary.averageAvailabilityRate = average_rate(
                [entry.stats.availabilityRate for entry in summary.playerStats]
            )
            summary.averageSelectionRate = average_rate(
                [entry.stats.selectionRate for entry in summary.playerStats]
            )
            summaries.append(summary)

    return summaries


def build_season_summaries(
    team_summaries: list[TeamStatisticsSummary], seasons_data: list[SeasonData]
) -> list[SeasonStatisticsSummary]:
    """One summary per processed season, including seasons nobody took part in"""
    summaries: list[SeasonStatisticsSummary] = []

    for season_data in seasons_data:
        season = season_data.season
        season_team_summaries = [ts for ts in team_summaries if ts.seasonId == season.id]
        entries = [entry for ts in season_team_summaries for entry in ts.playerStats]

        summaries.append(
            SeasonStatisticsSummary(
                seasonId=season.id,
                seasonName=season.name,
                totalPlayers=len({entry.playerId for entry in entries}),
                totalFixtures=max((ts.totalFixtures for ts in season_team_summaries), default=0),
                totalGamesPlayed=sum(entry.stats.gamesPlayed for entry in entries),
                averageAvailabilityRate=average_rate(
                    [entry.stats.availabilityRate for entry in entries]
                ),
                averageSelectionRate=average_rate([entry.stats.selectionRate for entry in entries]),
                teamSummaries=[
                    TeamSummaryEntry(
                        teamName=ts.teamName,
                        totalPlayers=ts.totalPlayers,
                        totalFixtures=ts.totalFixtures,
                        averageAvailabilityRate=ts.averageAvailabilityRate,
                    )
                    for ts in season_team_summaries
                ],
            )
        )

    return summaries


def calculate_statistics(
    players: list[Player], seasons_data: list[SeasonData], now: datetime
) -> StatisticsResult:
    """
    Compute every derived statistics document for one run.

    Pure: the same inputs and `now` always produce identical documents.
    """
    now = to_local_naive(now)
    player_statistics = [
        calculate_player_statistics(player, seasons_data, now) for player in players
    ]
    team_summaries = build_team_summaries(player_statistics, seasons_data)
    season_summaries = build_season_summaries(team_summaries, seasons_data)
    return StatisticsResult(
        playerStatistics=player_statistics,
        teamSummaries=team_summaries,
        seasonSummaries=season_summaries,
    )


# ==================== SERVICE ====================

class StatsService:
    """
    Loads source documents, runs the statistics calculation and persists the
    derived player, team and season documents.
    """

    def __init__(self, mongodb=None, store: DocumentStore | None = None):
        self.db = mongodb
        self.store = store or DocumentStore(mongodb)

    # -------------------- loading --------------------

    async def _load_list(self, collection: str, key: str, model: type[BaseModel]) -> list | None:
        """
        Read a list document and validate each entry.

        Malformed entries are logged and dropped. Returns None when the document
        does not exist.
        """
        raw = await self.store.get(collection, key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.warning(
                f"Document '{key}' in '{collection}' is not a list, ignoring it",
                extra={"collection": collection, "key": key, "type": type(raw).__name__},
            )
            return []

        items = []
        for index, entry in enumerate(raw):
            try:
                items.append(model.model_validate(entry))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed {model.__name__} #{index} in '{key}'",
                    extra={"collection": collection, "key": key, "error": str(e)},
                )
        return items

    async def load_all_players(self) -> list[Player]:
        players = await self._load_list(PLAYERS_COLLECTION, PLAYERS_KEY, Player)
        if players is None:
            raise ResourceNotFoundException(resource_type="Players", resource_id=PLAYERS_KEY)
        return players

    async def load_players(self, player_id: str | None = None) -> list[Player]:
        """Players to process: the given one, or every active player"""
        players = await self.load_all_players()

        if player_id:
            selected = [player for player in players if player.id == player_id]
            if not selected:
                raise ResourceNotFoundException(resource_type="Player", resource_id=player_id)
            return selected

        selected = [player for player in players if player.isActive]
        if not selected:
            raise ResourceNotFoundException(
                resource_type="Players",
                resource_id=PLAYERS_KEY,
                details={"reason": "No active players to process"},
            )
        return selected

    async def load_seasons(self, season_id: str | None = None) -> list[Season]:
        """Seasons to process: the given one, or all of them"""
        seasons = await self._load_list(SEASONS_COLLECTION, SEASONS_KEY, Season)
        if seasons is None:
            raise ResourceNotFoundException(resource_type="Seasons", resource_id=SEASONS_KEY)

        if season_id:
            seasons = [season for season in seasons if season.id == season_id]
            if not seasons:
                raise ResourceNotFoundException(resource_type="Season", resource_id=season_id)
        elif not seasons:
            raise ResourceNotFoundException(
                resource_type="Seasons",
                resource_id=SEASONS_KEY,
                details={"reason": "No seasons to process"},
            )
        return seasons

    async def _load_season_list(
        self, collection: str, key: str, model: type[BaseModel], season_id: str
    ) -> list:
        try:
            return await self._load_list(collection, key, model) or []
        except DatabaseOperationException as e:
            logger.error(
                f"Failed to load '{key}', season {season_id} continues without it",
                extra={"season_id": season_id, "key": key, "details": e.details},
            )
            return []

    async def _load_fixture_availability(
        self, fixture_id: str, semaphore: asyncio.Semaphore
    ) -> FixtureAvailability | None:
        async with semaphore:
            try:
                raw = await self.store.get(AVAILABILITY_COLLECTION, availability_key(fixture_id))
            except DatabaseOperationException as e:
                logger.error(
                    f"Failed to load availability for fixture {fixture_id}, skipping it",
                    extra={"fixture_id": fixture_id, "details": e.details},
                )
                return None

        if raw is None:
            return None
        if isinstance(raw, dict):
            raw = {"fixtureId": fixture_id, **raw}
        try:
            return FixtureAvailability.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed availability for fixture {fixture_id}",
                extra={"fixture_id": fixture_id, "error": str(e)},
            )
            return None

    async def load_availability(self, season_id: str) -> dict[str, FixtureAvailability]:
        """Availability records of a season keyed by fixture id; fixtures without one are absent"""
        index = await self._load_season_list(
            AVAILABILITY_COLLECTION,
            availability_index_key(season_id),
            AvailabilityIndexEntry,
            season_id,
        )
        fixture_ids = list(dict.fromkeys(entry.fixtureId for entry in index))
        if not fixture_ids:
            return {}

        semaphore = asyncio.Semaphore(settings.AVAILABILITY_LOAD_CONCURRENCY)
        records = await asyncio.gather(
            *(self._load_fixture_availability(fixture_id, semaphore) for fixture_id in fixture_ids)
        )
        return {
            fixture_id: record
            for fixture_id, record in zip(fixture_ids, records)
            if record is not None
        }

    async def load_season_data(self, season: Season) -> SeasonData:
        season_data = SeasonData(
            season=season,
            coreRoster=await self._load_season_list(
                CORE_ROSTER_COLLECTION, core_roster_key(season.id), CoreRosterAssignment, season.id
            ),
            fixtures=await self._load_season_list(
                FIXTURES_COLLECTION, fixtures_key(season.id), Fixture, season.id
            ),
            availability=await self.load_availability(season.id),
        )
        logger.debug(
            f"Loaded season {season.id}",
            extra={
                "season_id": season.id,
                "roster_entries": len(season_data.coreRoster),
                "fixtures": len(season_data.fixtures),
                "availability_records": len(season_data.availability),
            },
        )
        return season_data

    # -------------------- persistence --------------------

    async def _save(self, key: str, document: BaseModel) -> bool:
        try:
            await self.store.put(STATISTICS_COLLECTION, key, document.model_dump(mode="json"))
            return True
        except Exception as e:
            logger.exception(f"Failed to save statistics document '{key}'", extra={"error": str(e)})
            return False

    async def save_statistics(self, result: StatisticsResult) -> tuple[int, int]:
        """
        Persist every derived document; a failed write never stops the others.

        Returns:
            (players_saved, failed_writes)
        """
        players_saved = 0
        failed = 0

        for player_stats in result.playerStatistics:
            if await self._save(player_stats_key(player_stats.playerId), player_stats):
                players_saved += 1
            else:
                failed += 1

        for team_summary in result.teamSummaries:
            key = team_stats_key(team_summary.teamName, team_summary.seasonId)
            if not await self._save(key, team_summary):
                failed += 1

        for season_summary in result.seasonSummaries:
            if not await self._save(season_stats_key(season_summary.seasonId), season_summary):
                failed += 1

        return players_saved, failed

    # -------------------- trigger --------------------

    @log_performance
    async def recalculate(
        self,
        season_id: str | None = None,
        player_id: str | None = None,
        now: datetime | None = None,
    ) -> StatisticsCalculateResponse:
        """
        Recalculate and store statistics.

        Args:
            season_id: Only process this season (default: all seasons)
            player_id: Only process this player (default: all active players)
            now: Reference time separating past from future fixtures

        Raises:
            ResourceNotFoundException: If there are no players or seasons to process
            ValidationException: If a given season or player id is blank
        """
        for field, value in (("seasonId", season_id), ("playerId", player_id)):
            if value is not None and not value.strip():
                raise ValidationException(field, "must not be blank")

        now = to_local_naive(now or datetime.now())
        players = await self.load_players(player_id)
        seasons = await self.load_seasons(season_id)

        logger.info(
            "Calculating statistics",
            extra={"players": len(players), "seasons": len(seasons), "now": now.isoformat()},
        )

        seasons_data = [await self.load_season_data(season) for season in seasons]

        try:
            result = calculate_statistics(players, seasons_data, now)
        except Exception as e:
            logger.exception("Unexpected error while calculating statistics")
            raise StatsCalculationException(
                calculation_type="player",
                message=str(e),
                details={"season_id": season_id, "player_id": player_id},
            ) from e

        players_saved, failed = await self.save_statistics(result)

        warning = None
        if failed:
            warning = f"{failed} statistics document(s) could not be saved"
            logger.warning(warning, extra={"players_saved": players_saved, "failed": failed})

        return StatisticsCalculateResponse(
            success=True,
            playersUpdated=players_saved,
            seasonsUpdated=len(seasons),
            warning=warning,
        )

    # -------------------- reading --------------------

    async def _get_document(self, key: str, model: type[BaseModel], resource_type: str) -> Any:
        raw = await self.store.get(STATISTICS_COLLECTION, key)
        if raw is None:
            raise ResourceNotFoundException(
                resource_type=resource_type,
                resource_id=key,
                details={"hint": "Run statistics calculation first"},
            )
        return model.model_validate(raw)

    async def get_player_statistics(self, player_id: str) -> PlayerStatistics:
        return await self._get_document(
            player_stats_key(player_id), PlayerStatistics, "PlayerStatistics"
        )

    async def get_team_statistics(self, team_name: str, season_id: str) -> TeamStatisticsSummary:
        return await self._get_document(
            team_stats_key(team_name, season_id), TeamStatisticsSummary, "TeamStatistics"
        )

    async def get_season_statistics(self, season_id: str) -> SeasonStatisticsSummary:
        return await self._get_document(
            season_stats_key(season_id), SeasonStatisticsSummary, "SeasonStatistics"
        )

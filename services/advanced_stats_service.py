"""
Advanced Statistics Service

Season report computed on request from fixtures and availability records:
player-of-the-match leaderboard, umpire fees, win/loss and venue records,
match duties, playing time and declining availability.
"""

from collections import Counter

from config import settings
from models.availability import FixtureAvailability
from models.fixtures import Fixture, ResultEnum
from models.players import Player
from models.seasons import Season
from models.statistics import (
    AdvancedSeasonStatistics,
    AvailabilityAlertEntry,
    DutyEntry,
    PlayerOfMatchEntry,
    PlayingTimeEntry,
    UmpireFeeEntry,
    UmpireFeeReport,
    VenuePerformanceEntry,
    WinLossRecord,
)
from services.performance_monitor import log_performance
from services.stats_service import StatsService
from utils import percentage

RECENT_FIXTURE_COUNT = 5


def player_of_match_leaderboard(
    fixtures: list[Fixture], players: dict[str, Player]
) -> list[PlayerOfMatchEntry]:
    counts = Counter(
        fixture.playerOfMatch
        for fixture in fixtures
        if fixture.result == ResultEnum.WIN and fixture.playerOfMatch in players
    )
    entries = [
        PlayerOfMatchEntry(playerId=player_id, name=players[player_id].fullName, count=count)
        for player_id, count in counts.items()
    ]
    return sorted(entries, key=lambda e: e.count, reverse=True)


def umpire_fee_report(fixtures: list[Fixture], players: dict[str, Player]) -> UmpireFeeReport:
    report = UmpireFeeReport()
    by_player: dict[str, UmpireFeeEntry] = {}

    for fixture in fixtures:
        if not (fixture.paidUmpireFee and fixture.umpireFeePaidBy and fixture.umpireFeeAmount):
            continue
        player = players.get(fixture.umpireFeePaidBy)
        if player is None:
            continue
        entry = by_player.setdefault(player.id, UmpireFeeEntry(playerId=player.id, name=player.fullName))
        entry.totalPaid += fixture.umpireFeeAmount
        entry.count += 1
        report.totalPaid += fixture.umpireFeeAmount

    report.players = sorted(by_player.values(), key=lambda e: e.totalPaid, reverse=True)
    return report


def win_loss_analysis(fixtures: list[Fixture], team_names: list[str]) -> dict[str, WinLossRecord]:
    analysis = {}
    for team_name in team_names:
        decided = [f for f in fixtures if f.team == team_name and f.result]
        home = [f for f in decided if f.isHomeTeam]
        away = [f for f in decided if not f.isHomeTeam]
        wins = sum(1 for f in decided if f.result == ResultEnum.WIN)

        analysis[team_name] = WinLossRecord(
            total=len(decided),
            wins=wins,
            losses=sum(1 for f in decided if f.result == ResultEnum.LOSS),
            ties=sum(1 for f in decided if f.result == ResultEnum.TIE),
            winRate=percentage(wins, len(decided)),
            homeWinRate=percentage(sum(1 for f in home if f.result == ResultEnum.WIN), len(home)),
            awayWinRate=percentage(sum(1 for f in away if f.result == ResultEnum.WIN), len(away)),
        )
    return analysis


def venue_performance(fixtures: list[Fixture]) -> list[VenuePerformanceEntry]:
    venues: dict[str, VenuePerformanceEntry] = {}
    for fixture in fixtures:
        if not fixture.result or fixture.result in (ResultEnum.ABANDONED, ResultEnum.FORFEIT):
            continue
        venue_name = fixture.venue or "Unknown"
        entry = venues.setdefault(venue_name, VenuePerformanceEntry(venue=venue_name))
        entry.played += 1
        if fixture.result == ResultEnum.WIN:
            entry.won += 1
        elif fixture.result == ResultEnum.LOSS:
            entry.lost += 1

    for entry in venues.values():
        entry.winRate = percentage(entry.won, entry.played)
    return sorted(venues.values(), key=lambda e: e.winRate, reverse=True)


def duty_analysis(records: list[FixtureAvailability]) -> list[DutyEntry]:
    duties: dict[str, DutyEntry] = {}
    for record in records:
        for entry in record.playerAvailability:
            if not entry.duties:
                continue
            duty_entry = duties.setdefault(
                entry.playerId, DutyEntry(playerId=entry.playerId, name=entry.playerName)
            )
            for duty in entry.duties:
                duty_entry.duties[duty] = duty_entry.duties.get(duty, 0) + 1
                duty_entry.totalDuties += 1
    return sorted(duties.values(), key=lambda e: e.totalDuties, reverse=True)


def playing_time_report(records: list[FixtureAvailability], target: float) -> list[PlayingTimeEntry]:
    report: dict[str, PlayingTimeEntry] = {}
    for record in records:
        for entry in record.playerAvailability:
            row = report.setdefault(
                entry.playerId, PlayingTimeEntry(playerId=entry.playerId, name=entry.playerName)
            )
            if entry.wasAvailable:
                row.available += 1
                if entry.wasSelected:
                    row.selected += 1

    rows = [row for row in report.values() if row.available > 0]
    for row in rows:
        row.meetsTarget = row.selected / row.available * 100 >= target
        row.selectionRate = percentage(row.selected, row.available)
    # players furthest below target first
    return sorted(rows, key=lambda r: r.selectionRate)


def availability_alerts(
    fixtures: list[Fixture], records: list[FixtureAvailability], threshold: float
) -> list[AvailabilityAlertEntry]:
    """Players whose availability over the last few fixtures dropped well below their season rate"""
    ordered = sorted(fixtures, key=lambda f: f.date)
    recent_count = min(RECENT_FIXTURE_COUNT, len(ordered))
    recent_ids = {f.id for f in ordered[len(ordered) - recent_count:]}

    overall: Counter = Counter()
    recent: Counter = Counter()
    names: dict[str, str] = {}
    for record in records:
        is_recent = record.fixtureId in recent_ids
        for entry in record.playerAvailability:
            names.setdefault(entry.playerId, entry.playerName)
            if entry.wasAvailable:
                overall[entry.playerId] += 1
                if is_recent:
                    recent[entry.playerId] += 1

    alerts = []
    for player_id, name in names.items():
        overall_rate = overall[player_id] / len(records) * 100 if records else 0.0
        recent_rate = recent[player_id] / recent_count * 100 if recent_count else 0.0
        decline = round(overall_rate - recent_rate, 1)
        if decline > threshold:
            alerts.append(
                AvailabilityAlertEntry(
                    playerId=player_id,
                    name=name,
                    overallRate=round(overall_rate, 1),
                    recentRate=round(recent_rate, 1),
                    decline=decline,
                )
            )
    return sorted(alerts, key=lambda a: a.decline, reverse=True)


def build_advanced_statistics(
    season: Season,
    fixtures: list[Fixture],
    players: list[Player],
    records: list[FixtureAvailability],
    playing_time_target: float,
    decline_threshold: float,
) -> AdvancedSeasonStatistics:
    players_by_id = {player.id: player for player in players}
    team_names = season.team_names or sorted({fixture.team for fixture in fixtures})

    return AdvancedSeasonStatistics(
        seasonId=season.id,
        playerOfMatchLeaderboard=player_of_match_leaderboard(fixtures, players_by_id),
        umpireFees=umpire_fee_report(fixtures, players_by_id),
        winLossAnalysis=win_loss_analysis(fixtures, team_names),
        venuePerformance=venue_performance(fixtures),
        dutyAnalysis=duty_analysis(records),
        playingTimeReport=playing_time_report(records, playing_time_target),
        availabilityAlerts=availability_alerts(fixtures, records, decline_threshold),
    )


class AdvancedStatsService:
    """Builds the advanced season report from the same documents as StatsService"""

    def __init__(self, stats_service: StatsService):
        self.stats_service = stats_service

    @log_performance
    async def get_advanced_statistics(self, season_id: str) -> AdvancedSeasonStatistics:
        """
        Raises:
            ResourceNotFoundException: If the season or the player list does not exist
        """
        season = (await self.stats_service.load_seasons(season_id))[0]
        players = await self.stats_service.load_all_players()
        season_data = await self.stats_service.load_season_data(season)

        return build_advanced_statistics(
            season=season,
            fixtures=season_data.fixtures,
            players=players,
            records=list(season_data.availability.values()),
            playing_time_target=settings.PLAYING_TIME_TARGET,
            decline_threshold=settings.AVAILABILITY_DECLINE_THRESHOLD,
        )

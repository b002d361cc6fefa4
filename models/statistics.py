"""
Derived statistics documents.

These shapes are read verbatim by the reporting endpoints, so field names stay
camelCase. `totalFixtures` always holds the denominator used for the
availability rate ("fixtures considered").
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.availability import FixtureAvailability
from models.fixtures import Fixture
from models.roster import CoreRosterAssignment
from models.seasons import Season


class TeamSeasonStats(BaseModel):
    totalFixtures: int = 0
    timesAvailable: int = 0
    gamesPlayed: int = 0
    availabilityRate: int = 0
    selectionRate: int = 0


class ClubSeasonStats(TeamSeasonStats):
    pass


class SeasonStats(BaseModel):
    seasonName: str = Field(...)
    teamStats: Dict[str, TeamSeasonStats] = Field(default_factory=dict)
    clubStats: ClubSeasonStats = Field(default_factory=ClubSeasonStats)


class CareerStats(BaseModel):
    totalSeasons: int = 0
    totalFixtures: int = 0
    totalTimesAvailable: int = 0
    totalGamesPlayed: int = 0
    careerAvailabilityRate: int = 0
    careerSelectionRate: int = 0


class PlayerStatistics(BaseModel):
    playerId: str = Field(...)
    playerName: str = Field(...)
    seasonStats: Dict[str, SeasonStats] = Field(default_factory=dict)
    careerStats: CareerStats = Field(default_factory=CareerStats)
    lastUpdated: str = Field(...)


class TeamPlayerStats(BaseModel):
    playerId: str = Field(...)
    playerName: str = Field(...)
    stats: TeamSeasonStats = Field(...)


class TeamStatisticsSummary(BaseModel):
    seasonId: str = Field(...)
    seasonName: str = Field(...)
    teamName: str = Field(...)
    totalPlayers: int = 0
    totalFixtures: int = 0
    averageAvailabilityRate: int = 0
    averageSelectionRate: int = 0
    playerStats: List[TeamPlayerStats] = Field(default_factory=list)


class TeamSummaryEntry(BaseModel):
    teamName: str = Field(...)
    totalPlayers: int = 0
    totalFixtures: int = 0
    averageAvailabilityRate: int = 0


class SeasonStatisticsSummary(BaseModel):
    seasonId: str = Field(...)
    seasonName: str = Field(...)
    totalPlayers: int = 0
    totalFixtures: int = 0
    totalGamesPlayed: int = 0
    averageAvailabilityRate: int = 0
    averageSelectionRate: int = 0
    teamSummaries: List[TeamSummaryEntry] = Field(default_factory=list)


class SeasonData(BaseModel):
    """Everything the accumulator needs for one season, loaded once per run"""

    season: Season = Field(...)
    coreRoster: List[CoreRosterAssignment] = Field(default_factory=list)
    fixtures: List[Fixture] = Field(default_factory=list)
    availability: Dict[str, FixtureAvailability] = Field(default_factory=dict)


class StatisticsResult(BaseModel):
    playerStatistics: List[PlayerStatistics] = Field(default_factory=list)
    teamSummaries: List[TeamStatisticsSummary] = Field(default_factory=list)
    seasonSummaries: List[SeasonStatisticsSummary] = Field(default_factory=list)


class StatisticsCalculateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"seasonId": "season-2025", "playerId": None}}
    )

    seasonId: Optional[str] = Field(default=None, description="Only recalculate this season")
    playerId: Optional[str] = Field(default=None, description="Only recalculate this player")


class StatisticsCalculateResponse(BaseModel):
    success: bool = True
    playersUpdated: int = 0
    seasonsUpdated: int = 0
    warning: Optional[str] = None


# Advanced season report
# ----------------------

class PlayerOfMatchEntry(BaseModel):
    playerId: str
    name: str
    count: int = 0


class UmpireFeeEntry(BaseModel):
    playerId: str
    name: str
    totalPaid: float = 0
    count: int = 0


class UmpireFeeReport(BaseModel):
    totalPaid: float = 0
    players: List[UmpireFeeEntry] = Field(default_factory=list)


class WinLossRecord(BaseModel):
    total: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    winRate: float = 0.0
    homeWinRate: float = 0.0
    awayWinRate: float = 0.0


class VenuePerformanceEntry(BaseModel):
    venue: str
    played: int = 0
    won: int = 0
    lost: int = 0
    winRate: float = 0.0


class DutyEntry(BaseModel):
    playerId: str
    name: str
    duties: Dict[str, int] = Field(default_factory=dict)
    totalDuties: int = 0


class PlayingTimeEntry(BaseModel):
    playerId: str
    name: str
    available: int = 0
    selected: int = 0
    selectionRate: float = 0.0
    meetsTarget: bool = False


class AvailabilityAlertEntry(BaseModel):
    playerId: str
    name: str
    overallRate: float = 0.0
    recentRate: float = 0.0
    decline: float = 0.0


class AdvancedSeasonStatistics(BaseModel):
    seasonId: str
    playerOfMatchLeaderboard: List[PlayerOfMatchEntry] = Field(default_factory=list)
    umpireFees: UmpireFeeReport = Field(default_factory=UmpireFeeReport)
    winLossAnalysis: Dict[str, WinLossRecord] = Field(default_factory=dict)
    venuePerformance: List[VenuePerformanceEntry] = Field(default_factory=list)
    dutyAnalysis: List[DutyEntry] = Field(default_factory=list)
    playingTimeReport: List[PlayingTimeEntry] = Field(default_factory=list)
    availabilityAlerts: List[AvailabilityAlertEntry] = Field(default_factory=list)

"""Unit tests for the statistics calculation"""
import json
from datetime import datetime, timezone

import pytest

from models.availability import FixtureAvailability
from models.fixtures import Fixture
from models.players import Player
from models.roster import CoreRosterAssignment
from models.seasons import Season
from models.statistics import SeasonData
from services.stats_service import (
    average_rate,
    calculate_career_stats,
    calculate_player_season_stats,
    calculate_player_statistics,
    calculate_rate,
    calculate_statistics,
)
from tests.fixtures.data_fixtures import (
    create_test_availability,
    create_test_availability_entry,
    create_test_fixture,
    create_test_player,
    create_test_roster_entry,
    create_test_season,
)

NOW = datetime(2025, 6, 15, 12, 0)
SEASON_ID = "season-2025"


def make_season_data(season_id=SEASON_ID, fixtures=(), roster=(), availability=(), name=None):
    return SeasonData(
        season=Season.model_validate(create_test_season(season_id, name=name or season_id)),
        coreRoster=[CoreRosterAssignment.model_validate(r) for r in roster],
        fixtures=[Fixture.model_validate(f) for f in fixtures],
        availability={
            a["fixtureId"]: FixtureAvailability.model_validate(a) for a in availability
        },
    )


def make_player(player_id, first="Test", last="Player", **overrides):
    return Player.model_validate(
        create_test_player(player_id, firstName=first, lastName=last, **overrides)
    )


@pytest.fixture
def scenario_p():
    """
    P is core to Team A (3 past fixtures, available for all, selected for 2) and
    non-core to Team B (5 past fixtures, selected once, available-not-selected once).
    """
    fixtures = [
        create_test_fixture("a1", "Team A", "2025-05-01"),
        create_test_fixture("a2", "Team A", "2025-05-08"),
        create_test_fixture("a3", "Team A", "2025-05-15"),
    ] + [create_test_fixture(f"b{i}", "Team B", f"2025-05-0{i}") for i in range(1, 6)]
    availability = [
        create_test_availability("a1", [create_test_availability_entry("P", True, True)]),
        create_test_availability("a2", [create_test_availability_entry("P", True, True)]),
        create_test_availability("a3", [create_test_availability_entry("P", True, False)]),
        create_test_availability("b1", [create_test_availability_entry("P", True, True)]),
        create_test_availability("b2", [create_test_availability_entry("P", True, False)]),
    ]
    roster = [
        create_test_roster_entry("P", "Team A"),
        create_test_roster_entry("P", "Team B", is_core=False),
    ]
    return make_season_data(fixtures=fixtures, roster=roster, availability=availability)


class TestRates:
    """Test rate and rounding helpers"""

    def test_rate_rounds_half_up(self):
        assert calculate_rate(1, 8) == 13  # 12.5
        assert calculate_rate(2, 3) == 67
        assert calculate_rate(1, 3) == 33
        assert calculate_rate(1, 2) == 50

    def test_rate_is_zero_without_denominator(self):
        assert calculate_rate(0, 0) == 0
        assert calculate_rate(3, 0) == 0

    def test_full_rate(self):
        assert calculate_rate(7, 7) == 100

    def test_average_rate_rounds_half_up(self):
        assert average_rate([100, 67]) == 84  # 83.5
        assert average_rate([]) == 0


class TestPlayerSeasonStats:
    """Test per-player, per-season accumulation"""

    def test_core_team_stats(self, scenario_p):
        stats = calculate_player_season_stats("P", scenario_p, NOW)

        assert stats.teamStats["Team A"].model_dump() == {
            "totalFixtures": 3,
            "timesAvailable": 3,
            "gamesPlayed": 2,
            "availabilityRate": 100,
            "selectionRate": 67,
        }

    def test_non_core_team_counts_only_selected_fixtures(self, scenario_p):
        stats = calculate_player_season_stats("P", scenario_p, NOW)

        assert stats.teamStats["Team B"].model_dump() == {
            "totalFixtures": 1,
            "timesAvailable": 1,
            "gamesPlayed": 1,
            "availabilityRate": 100,
            "selectionRate": 100,
        }

    def test_club_stats_sum_team_stats(self, scenario_p):
        stats = calculate_player_season_stats("P", scenario_p, NOW)

        assert stats.clubStats.model_dump() == {
            "totalFixtures": 4,
            "timesAvailable": 4,
            "gamesPlayed": 3,
            "availabilityRate": 100,
            "selectionRate": 75,
        }

    def test_core_denominator_includes_fixtures_without_records(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture(f"c{i}", "Team C", f"2025-05-0{i}") for i in range(1, 5)],
            roster=[create_test_roster_entry("Q", "Team C")],
            availability=[
                create_test_availability("c1", [create_test_availability_entry("Q", True, True)]),
            ],
        )

        stats = calculate_player_season_stats("Q", season_data, NOW)

        team = stats.teamStats["Team C"]
        assert team.totalFixtures == 4
        assert team.timesAvailable == 1
        assert team.gamesPlayed == 1
        assert team.availabilityRate == 25
        assert team.selectionRate == 100

    def test_core_player_without_records_is_skipped(self):
        """Q is core to Team C but never recorded availability"""
        season_data = make_season_data(
            fixtures=[create_test_fixture("c1", "Team C", "2025-05-01")],
            roster=[create_test_roster_entry("Q", "Team C")],
            availability=[
                create_test_availability("c1", [create_test_availability_entry("other", True, True)]),
            ],
        )

        assert calculate_player_season_stats("Q", season_data, NOW) is None

    def test_record_without_response_does_not_count_as_participation(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture("c1", "Team C", "2025-05-01")],
            roster=[create_test_roster_entry("Q", "Team C")],
            availability=[
                create_test_availability("c1", [create_test_availability_entry("Q", False, False)]),
            ],
        )

        assert calculate_player_season_stats("Q", season_data, NOW) is None

    def test_future_fixture_is_ignored(self):
        season_data = make_season_data(
            fixtures=[
                create_test_fixture("past", "Team A", "2025-06-01"),
                create_test_fixture("future", "Team A", "2025-07-01"),
            ],
            roster=[create_test_roster_entry("P", "Team A")],
            availability=[
                create_test_availability("past", [create_test_availability_entry("P", False, False)]),
                create_test_availability("future", [create_test_availability_entry("P", True, False)]),
            ],
        )

        stats = calculate_player_season_stats("P", season_data, NOW)

        team = stats.teamStats["Team A"]
        assert team.totalFixtures == 1
        assert team.timesAvailable == 0
        assert team.gamesPlayed == 0
        assert team.availabilityRate == 0

    def test_fixture_on_todays_date_is_past(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture("today", "Team A", "2025-06-15")],
            roster=[create_test_roster_entry("P", "Team A")],
            availability=[
                create_test_availability("today", [create_test_availability_entry("P", True, True)]),
            ],
        )

        stats = calculate_player_season_stats("P", season_data, NOW)

        assert stats.teamStats["Team A"].totalFixtures == 1

    def test_non_core_available_but_not_selected_contributes_nothing(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture("b1", "Team B", "2025-05-01")],
            availability=[
                create_test_availability("b1", [create_test_availability_entry("R", True, False)]),
            ],
        )

        stats = calculate_player_season_stats("R", season_data, NOW)

        assert stats is not None
        assert stats.teamStats["Team B"].totalFixtures == 0
        assert stats.teamStats["Team B"].availabilityRate == 0
        assert stats.teamStats["Team B"].selectionRate == 0
        assert stats.clubStats.totalFixtures == 0

    def test_core_team_without_records_still_listed_for_participating_player(self):
        season_data = make_season_data(
            fixtures=[
                create_test_fixture("a1", "Team A", "2025-05-01"),
                create_test_fixture("a2", "Team A", "2025-05-08"),
                create_test_fixture("b1", "Team B", "2025-05-02"),
            ],
            roster=[create_test_roster_entry("P", "Team A")],
            availability=[
                create_test_availability("b1", [create_test_availability_entry("P", True, True)]),
            ],
        )

        stats = calculate_player_season_stats("P", season_data, NOW)

        assert stats.teamStats["Team A"].totalFixtures == 2
        assert stats.teamStats["Team A"].timesAvailable == 0
        assert stats.clubStats.totalFixtures == 3

    def test_roster_entry_not_core_is_ignored(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture("a1", "Team A", "2025-05-01"),
                      create_test_fixture("a2", "Team A", "2025-05-08")],
            roster=[create_test_roster_entry("P", "Team A", is_core=False)],
            availability=[
                create_test_availability("a1", [create_test_availability_entry("P", True, True)]),
            ],
        )

        stats = calculate_player_season_stats("P", season_data, NOW)

        assert stats.teamStats["Team A"].totalFixtures == 1

    def test_season_without_fixtures_contributes_nothing(self):
        season_data = make_season_data(
            availability=[
                create_test_availability("x1", [create_test_availability_entry("P", True, True)]),
            ],
        )

        assert calculate_player_season_stats("P", season_data, NOW) is None

    def test_selected_without_available_is_treated_as_available(self):
        season_data = make_season_data(
            fixtures=[create_test_fixture("a1", "Team A", "2025-05-01")],
            roster=[create_test_roster_entry("P", "Team A")],
            availability=[
                create_test_availability("a1", [create_test_availability_entry("P", False, True)]),
            ],
        )

        stats = calculate_player_season_stats("P", season_data, NOW)

        assert stats.teamStats["Team A"].timesAvailable == 1
        assert stats.teamStats["Team A"].selectionRate == 100

    def test_rates_stay_within_bounds(self, scenario_p):
        stats = calculate_player_season_stats("P", scenario_p, NOW)

        for team in list(stats.teamStats.values()) + [stats.clubStats]:
            assert 0 <= team.availabilityRate <= 100
            assert 0 <= team.selectionRate <= 100
            assert team.timesAvailable <= team.totalFixtures
            assert team.gamesPlayed <= team.timesAvailable


class TestCareerStats:
    """Test career totals across seasons"""

    def test_career_sums_club_totals_and_recomputes_rates(self):
        season_1 = make_season_data(
            "s1",
            fixtures=[create_test_fixture(f"s1-{i}", "Team A", f"2024-05-0{i}", "s1") for i in range(1, 5)],
            roster=[create_test_roster_entry("P", "Team A", "s1")],
            availability=[
                create_test_availability("s1-1", [create_test_availability_entry("P", True, True)], "s1"),
            ],
        )
        season_2 = make_season_data(
            "s2",
            fixtures=[create_test_fixture("s2-1", "Team A", "2025-05-01", "s2")],
            roster=[create_test_roster_entry("P", "Team A", "s2")],
            availability=[
                create_test_availability("s2-1", [create_test_availability_entry("P", True, False)], "s2"),
            ],
        )

        statistics = calculate_player_statistics(make_player("P"), [season_1, season_2], NOW)

        career = statistics.careerStats
        assert career.totalSeasons == 2
        assert career.totalFixtures == 5
        assert career.totalTimesAvailable == 2
        assert career.totalGamesPlayed == 1
        # 2/5 pooled, not the mean of 25% and 100%
        assert career.careerAvailabilityRate == 40
        assert career.careerSelectionRate == 50

    def test_skipped_season_does_not_count(self):
        active = make_season_data(
            "s1",
            fixtures=[create_test_fixture("s1-1", "Team A", "2025-05-01", "s1")],
            availability=[
                create_test_availability("s1-1", [create_test_availability_entry("P", True, True)], "s1"),
            ],
        )
        silent = make_season_data(
            "s2",
            fixtures=[create_test_fixture("s2-1", "Team A", "2025-05-01", "s2")],
            roster=[create_test_roster_entry("P", "Team A", "s2")],
        )

        statistics = calculate_player_statistics(make_player("P"), [active, silent], NOW)

        assert list(statistics.seasonStats) == ["s1"]
        assert statistics.careerStats.totalSeasons == 1

    def test_no_seasons_gives_zero_career(self):
        career = calculate_career_stats([])

        assert career.totalSeasons == 0
        assert career.careerAvailabilityRate == 0
        assert career.careerSelectionRate == 0

    def test_player_name_and_timestamp(self, scenario_p):
        statistics = calculate_player_statistics(make_player("P", "Ravi", "Shah"), [scenario_p], NOW)

        assert statistics.playerName == "Ravi Shah"
        assert statistics.lastUpdated == NOW.isoformat()


class TestSummaries:
    """Test team and season roll-ups"""

    @pytest.fixture
    def two_player_season(self):
        fixtures = [
            create_test_fixture("a1", "Team A", "2025-05-01"),
            create_test_fixture("a2", "Team A", "2025-05-08"),
            create_test_fixture("a3", "Team A", "2025-07-01"),
            create_test_fixture("b1", "Team B", "2025-05-02"),
        ]
        roster = [
            create_test_roster_entry("P", "Team A"),
            create_test_roster_entry("Q", "Team A"),
        ]
        availability = [
            create_test_availability("a1", [
                create_test_availability_entry("P", True, True),
                create_test_availability_entry("Q", True, False),
            ]),
            create_test_availability("a2", [
                create_test_availability_entry("P", True, True),
            ]),
            create_test_availability("b1", [
                create_test_availability_entry("Q", True, True),
            ]),
        ]
        return make_season_data(fixtures=fixtures, roster=roster, availability=availability)

    def test_team_summary_uses_unweighted_average(self, two_player_season):
        players = [make_player("P"), make_player("Q")]

        result = calculate_statistics(players, [two_player_season], NOW)

        team_a = next(ts for ts in result.teamSummaries if ts.teamName == "Team A")
        # P: 2/2 = 100%, Q: 1/2 = 50%
        assert team_a.totalPlayers == 2
        assert team_a.totalFixtures == 3
        assert team_a.averageAvailabilityRate == 75
        # P: 2/2 = 100%, Q: 0/1 = 0%
        assert team_a.averageSelectionRate == 50
        assert [entry.playerId for entry in team_a.playerStats] == ["P", "Q"]

    def test_season_summary_aggregates_player_team_entries(self, two_player_season):
        players = [make_player("P"), make_player("Q")]

        result = calculate_statistics(players, [two_player_season], NOW)

        summary = result.seasonSummaries[0]
        assert summary.seasonId == SEASON_ID
        assert summary.totalPlayers == 2
        assert summary.totalGamesPlayed == 3
        assert summary.totalFixtures == 3
        # entries: P/A 100, Q/A 50, Q/B 100
        assert summary.averageAvailabilityRate == 83
        # entries: P/A 100, Q/A 0, Q/B 100
        assert summary.averageSelectionRate == 67
        assert [ts.teamName for ts in summary.teamSummaries] == ["Team A", "Team B"]

    def test_empty_season_still_gets_summary(self):
        empty = make_season_data("empty")

        result = calculate_statistics([make_player("P")], [empty], NOW)

        assert result.teamSummaries == []
        assert len(result.seasonSummaries) == 1
        assert result.seasonSummaries[0].totalPlayers == 0
        assert result.seasonSummaries[0].averageAvailabilityRate == 0

    def test_calculation_is_idempotent(self, two_player_season):
        players = [make_player("P"), make_player("Q")]

        first = calculate_statistics(players, [two_player_season], NOW)
        second = calculate_statistics(players, [two_player_season], NOW)

        assert json.dumps(first.model_dump(mode="json")) == json.dumps(second.model_dump(mode="json"))

    def test_aware_now_is_accepted(self, two_player_season):
        aware_now = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

        result = calculate_statistics([make_player("P")], [two_player_season], aware_now)

        assert result.playerStatistics[0].seasonStats[SEASON_ID].teamStats["Team A"].totalFixtures == 2

"""
Unit tests for the data models (Team, Fixture, GenerationResult).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import Team, Fixture, GenerationResult, FIXTURE_SCHEDULED


class TestTeam:
    """Tests for the Team model."""

    def test_team_name_defaults_to_id(self):
        team = Team("t1")
        assert team.team_id == "t1"
        assert team.name == "t1"

    def test_team_id_is_stringified(self):
        assert Team(7, "Seven").team_id == "7"

    def test_team_equality(self):
        assert Team("t1", "One") == Team("t1", "One")
        assert Team("t1", "One") != Team("t2", "One")

    def test_team_repr(self):
        repr_str = repr(Team("t1", "Tigers"))
        assert "t1" in repr_str
        assert "Tigers" in repr_str


class TestFixture:
    """Tests for the Fixture model."""

    def test_fixture_defaults(self):
        fixture = Fixture("cup", 1, "A", "B")
        assert fixture.status == FIXTURE_SCHEDULED
        assert fixture.kickoff is None
        assert fixture.teams == ("A", "B")

    def test_fixture_dict_round_trip(self):
        fixture = Fixture("cup", 3, "A", "B", kickoff="2026-11-01T15:00:00")
        data = fixture.to_dict()
        assert data == {
            'tournament_id': 'cup',
            'match_day': 3,
            'home_team_id': 'A',
            'away_team_id': 'B',
            'status': 'scheduled',
            'kickoff': '2026-11-01T15:00:00',
        }
        assert Fixture.from_dict(data) == fixture

    def test_from_dict_fills_missing_optional_fields(self):
        fixture = Fixture.from_dict({
            'tournament_id': 'cup', 'match_day': '2', 'home_team_id': 'A', 'away_team_id': 'B'
        })
        assert fixture.match_day == 2
        assert fixture.status == FIXTURE_SCHEDULED
        assert fixture.kickoff is None


class TestGenerationResult:

    def test_counts(self):
        result = GenerationResult([Fixture("cup", 1, "A", "B"), Fixture("cup", 2, "A", "C")])
        assert result.fixtures_created == 2
        assert result.match_days == 2

    def test_empty(self):
        result = GenerationResult([])
        assert result.fixtures_created == 0
        assert result.match_days == 0

"""
Round-robin fixture generation using the circle method.

One team keeps its place while the others rotate around it, so every pair
meets exactly once over ``n - 1`` rounds. An odd field gets a bye placeholder
and whoever is paired with it rests that round.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from league.errors import AlreadyScheduledError, DuplicateTeamError, InsufficientTeamsError
from league.kickoff import plan_kickoffs
from league.models import Fixture, GenerationResult, Team

BYE = None


def _team_ids(teams: Iterable) -> List[str]:
    return [team.team_id if isinstance(team, Team) else str(team) for team in teams]


def count_rounds(num_teams: int) -> int:
    """Rounds in a single leg: n - 1 for even n, n for odd n."""
    if num_teams < 2:
        return 0
    return num_teams - 1 if num_teams % 2 == 0 else num_teams


def validate_teams(teams: Iterable) -> List[str]:
    """Return the team ids, refusing short or duplicated lists."""
    team_ids = _team_ids(teams)
    if len(team_ids) < 2:
        raise InsufficientTeamsError(len(team_ids))
    seen = set()
    for team_id in team_ids:
        if team_id in seen:
            raise DuplicateTeamError(team_id)
        seen.add(team_id)
    return team_ids


def generate_round_robin(teams, tournament_id, existing_fixtures=None,
                         double_round_robin: bool = False) -> List[Fixture]:
    """
    Build the full single (or double) round-robin schedule for a tournament.

    Home and away are positional: the team at the lower working index is at
    home. In the second leg of a double round-robin every pairing is repeated
    with home and away swapped, continuing the match day numbering.

    Raises InsufficientTeamsError, DuplicateTeamError or AlreadyScheduledError
    before any fixture is built.
    """
    team_ids = validate_teams(teams)
    if existing_fixtures:
        raise AlreadyScheduledError(tournament_id)

    working = list(team_ids)
    if len(working) % 2 == 1:
        working.append(BYE)
    slots = len(working)
    rounds = slots - 1

    fixtures = []
    for round_index in range(rounds):
        for m in range(slots // 2):
            home = working[m]
            away = working[slots - 1 - m]
            if home is BYE or away is BYE:
                continue
            fixtures.append(Fixture(tournament_id, round_index + 1, home, away))
        # Keep index 0 fixed, move the last entry to index 1
        working.insert(1, working.pop())

    if double_round_robin:
        second_leg = [
            Fixture(tournament_id, f.match_day + rounds, f.away_team_id, f.home_team_id)
            for f in fixtures
        ]
        fixtures.extend(second_leg)

    return fixtures


def byes_by_round(fixtures: List[Fixture], teams) -> Dict[int, List[str]]:
    """Map each match day to the teams that do not play on it."""
    team_ids = _team_ids(teams)
    playing = {}
    for fixture in fixtures:
        playing.setdefault(fixture.match_day, set()).update(fixture.teams)
    return {
        match_day: [t for t in team_ids if t not in playing[match_day]]
        for match_day in sorted(playing)
    }


def scheduled_team_ids(fixtures: List[Fixture]) -> List[str]:
    """Team ids appearing in the fixtures, in order of first appearance."""
    seen = {}
    for fixture in fixtures:
        for team_id in fixture.teams:
            seen.setdefault(team_id, None)
    return list(seen)


def generate_fixtures(teams, tournament_id, existing_fixtures=None,
                      settings: Optional[dict] = None,
                      start: Optional[datetime] = None) -> GenerationResult:
    """Generate fixtures for a tournament and apply its scheduling settings."""
    settings = settings or {}
    double_round_robin = settings.get('double_round_robin', False)
    kickoffs = settings.get('plan_kickoffs', True)
    for key, value in (('double_round_robin', double_round_robin), ('plan_kickoffs', kickoffs)):
        if not isinstance(value, bool):
            raise TypeError(f'{key} must be true or false, got {value!r}')

    fixtures = generate_round_robin(
        teams, tournament_id,
        existing_fixtures=existing_fixtures,
        double_round_robin=double_round_robin,
    )
    if kickoffs:
        plan_kickoffs(fixtures, start or datetime.now(), settings)
    return GenerationResult(fixtures)

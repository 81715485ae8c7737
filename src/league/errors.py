"""
Errors raised when a fixture list cannot be generated.
"""


class FixtureGenerationError(Exception):
    """Base class for every refusal to generate fixtures."""


class InsufficientTeamsError(FixtureGenerationError):
    """Fewer than two eligible teams."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f'Need at least 2 approved teams to generate fixtures ({count} found).')


class DuplicateTeamError(FixtureGenerationError):
    """The same team id was supplied more than once."""

    def __init__(self, team_id: str):
        self.team_id = team_id
        super().__init__(f'Team "{team_id}" appears more than once.')


class AlreadyScheduledError(FixtureGenerationError):
    """Fixtures already exist for the tournament."""

    def __init__(self, tournament_id: str):
        self.tournament_id = tournament_id
        super().__init__(f'Fixtures already generated for tournament "{tournament_id}".')

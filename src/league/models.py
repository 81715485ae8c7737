TOURNAMENT_ENROLLING = 'enrolling'
TOURNAMENT_SCHEDULED = 'scheduled'

FIXTURE_SCHEDULED = 'scheduled'

REGISTRATION_PENDING = 'pending'
REGISTRATION_APPROVED = 'approved'
REGISTRATION_REJECTED = 'rejected'
REGISTRATION_STATUSES = (REGISTRATION_PENDING, REGISTRATION_APPROVED, REGISTRATION_REJECTED)


class Team:
    def __init__(self, team_id, name=None):
        self.team_id = str(team_id)
        self.name = name if name else self.team_id

    def __eq__(self, other):
        return isinstance(other, Team) and self.team_id == other.team_id and self.name == other.name

    def __hash__(self):
        return hash((self.team_id, self.name))

    def __repr__(self):
        return f"Team(team_id={self.team_id}, name={self.name})"


class Fixture:
    def __init__(self, tournament_id, match_day, home_team_id, away_team_id,
                 status=FIXTURE_SCHEDULED, kickoff=None):
        self.tournament_id = tournament_id
        self.match_day = match_day
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.status = status
        self.kickoff = kickoff  # ISO-8601 local time, None when not planned

    @property
    def teams(self):
        return (self.home_team_id, self.away_team_id)

    def to_dict(self):
        return {
            'tournament_id': self.tournament_id,
            'match_day': self.match_day,
            'home_team_id': self.home_team_id,
            'away_team_id': self.away_team_id,
            'status': self.status,
            'kickoff': self.kickoff,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            tournament_id=data['tournament_id'],
            match_day=int(data['match_day']),
            home_team_id=data['home_team_id'],
            away_team_id=data['away_team_id'],
            status=data.get('status', FIXTURE_SCHEDULED),
            kickoff=data.get('kickoff'),
        )

    def __eq__(self, other):
        return isinstance(other, Fixture) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Fixture(tournament_id={self.tournament_id}, match_day={self.match_day}, "
                f"home={self.home_team_id}, away={self.away_team_id}, status={self.status})")


class GenerationResult:
    def __init__(self, fixtures):
        self.fixtures = fixtures

    @property
    def fixtures_created(self):
        return len(self.fixtures)

    @property
    def match_days(self):
        return max((f.match_day for f in self.fixtures), default=0)

    def __repr__(self):
        return f"GenerationResult(fixtures_created={self.fixtures_created}, match_days={self.match_days})"

import argparse
import sys
import yaml
from league.errors import FixtureGenerationError
from league.models import Team
from league.round_robin import generate_round_robin, byes_by_round


def load_teams(file_path):
    """Load teams from a YAML list of names or {id, name} entries."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('teams') or []
    if not isinstance(data, list):
        raise ValueError(f"{file_path}: expected a list of teams")
    teams = []
    for entry in data:
        if isinstance(entry, dict):
            if not entry.get('id') and not entry.get('name'):
                raise ValueError(f"{file_path}: team entry {entry} has neither id nor name")
            teams.append(Team(entry.get('id') or entry['name'], entry.get('name')))
        else:
            teams.append(Team(entry))
    return teams


def format_schedule(fixtures, teams):
    """Render fixtures as '# Match day N' blocks of 'Home vs Away' lines."""
    names = {team.team_id: team.name for team in teams}
    byes = byes_by_round(fixtures, teams)
    lines = []
    current_day = None
    for fixture in fixtures:
        if fixture.match_day != current_day:
            if current_day is not None:
                lines.append('')
            current_day = fixture.match_day
            lines.append(f"# Match day {current_day}")
            for team_id in byes.get(current_day, []):
                lines.append(f"Bye: {names[team_id]}")
        lines.append(f"{names[fixture.home_team_id]} vs {names[fixture.away_team_id]}")
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Print a round-robin schedule for a list of teams.')
    parser.add_argument('teams_file', help='YAML file listing the teams')
    parser.add_argument('--tournament', default='league', help='Tournament id stamped on each fixture')
    parser.add_argument('--double', action='store_true', help='Play a second leg with home and away swapped')
    args = parser.parse_args(argv)

    try:
        teams = load_teams(args.teams_file)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"Error: could not load teams: {e}", file=sys.stderr)
        return 1

    try:
        fixtures = generate_round_robin(teams, args.tournament, double_round_robin=args.double)
    except FixtureGenerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_schedule(fixtures, teams))
    return 0


if __name__ == '__main__':
    sys.exit(main())

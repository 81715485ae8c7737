"""
Flask web application for League Fixtures.
"""
import os
import csv
import io
import re
import logging
import yaml
from datetime import datetime
from filelock import FileLock
from flask import Flask, request, jsonify, Response, abort
from league.errors import FixtureGenerationError, AlreadyScheduledError
from league.kickoff import DEFAULT_KICKOFF_SETTINGS
from league.models import (
    Fixture, Team, TOURNAMENT_ENROLLING, TOURNAMENT_SCHEDULED,
    REGISTRATION_PENDING, REGISTRATION_APPROVED, REGISTRATION_STATUSES,
)
from league.round_robin import generate_fixtures, byes_by_round, scheduled_team_ids

app = Flask(__name__)
app.logger.setLevel(logging.INFO)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

# Tournament registry and per-tournament data directories
TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
TOURNAMENTS_DIR = os.path.join(DATA_DIR, 'tournaments')
LOCK_TIMEOUT_SECONDS = 10


def _data_lock() -> FileLock:
    """Lock serializing writes to the data directory."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT_SECONDS)


def _slugify(name: str) -> str:
    """Convert a name to a filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def _tournament_dir(slug: str) -> str:
    return os.path.join(TOURNAMENTS_DIR, slug)


def _file_path(slug: str, filename: str) -> str:
    """Return full path to a data file of a tournament."""
    return os.path.join(_tournament_dir(slug), filename)


def _load_yaml(path: str, strict: bool = False):
    """Read a YAML file, treating missing files as empty.

    Unreadable files are logged and treated as empty unless strict is set,
    in which case the parse error propagates.
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        if strict:
            raise
        app.logger.warning(f'Failed to parse {path}: {e}')
        return None


def _save_yaml(path: str, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_tournaments() -> dict:
    """Load the tournament registry."""
    data = _load_yaml(TOURNAMENTS_FILE)
    if not data:
        return {'tournaments': []}
    data.setdefault('tournaments', [])
    return data


def save_tournaments(data: dict):
    """Save the tournament registry."""
    _save_yaml(TOURNAMENTS_FILE, data)


def get_tournament(slug: str) -> dict:
    """Return the registry entry for slug, or 404."""
    if not slug or '..' in slug or '/' in slug or '\\' in slug:
        abort(404)
    for tournament in load_tournaments()['tournaments']:
        if tournament['slug'] == slug:
            return tournament
    abort(404)


def set_tournament_status(slug: str, status: str):
    """Update a tournament's status in the registry."""
    data = load_tournaments()
    for tournament in data['tournaments']:
        if tournament['slug'] == slug:
            tournament['status'] = status
    save_tournaments(data)


def get_default_settings():
    """Return default tournament settings."""
    return {
        'tournament_name': 'League',
        'double_round_robin': False,
        'plan_kickoffs': True,
        **DEFAULT_KICKOFF_SETTINGS,
    }


def load_settings(slug: str) -> dict:
    """Load tournament settings, merging with defaults."""
    defaults = get_default_settings()
    data = _load_yaml(_file_path(slug, 'settings.yaml'))
    if not data:
        return defaults
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return data


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_time(value) -> bool:
    try:
        datetime.strptime(value, '%H:%M')
    except (TypeError, ValueError):
        return False
    return True


# (check, error message) per setting key
SETTING_RULES = {
    'tournament_name': (lambda v: isinstance(v, str) and v.strip() != '', 'must be a non-empty string'),
    'double_round_robin': (lambda v: isinstance(v, bool), 'must be true or false'),
    'plan_kickoffs': (lambda v: isinstance(v, bool), 'must be true or false'),
    'lead_days': (lambda v: _is_int(v) and v >= 0, 'must be a non-negative integer'),
    'match_weekday': (lambda v: _is_int(v) and 0 <= v <= 6, 'must be an integer from 0 (Monday) to 6 (Sunday)'),
    'match_day_interval_days': (lambda v: _is_int(v) and v >= 1, 'must be a positive integer'),
    'kickoff_spacing_minutes': (lambda v: _is_int(v) and v >= 1, 'must be a positive integer'),
    'first_kickoff': (_is_time, 'must be a time in HH:MM format'),
    'last_kickoff': (_is_time, 'must be a time in HH:MM format'),
}


def validate_settings(updates: dict) -> list:
    """Return a list of error messages for the given setting updates."""
    errors = []
    for key in sorted(updates):
        if key not in SETTING_RULES:
            errors.append(f'Unknown setting: {key}')
            continue
        check, message = SETTING_RULES[key]
        if not check(updates[key]):
            errors.append(f'{key} {message}')
    return errors


def save_settings(slug: str, settings: dict):
    """Save tournament settings."""
    _save_yaml(_file_path(slug, 'settings.yaml'), settings)


def load_registrations(slug: str) -> dict:
    """Load team registrations."""
    data = _load_yaml(_file_path(slug, 'registrations.yaml'))
    if not data:
        return {'registration_open': False, 'teams': []}
    data.setdefault('registration_open', False)
    data.setdefault('teams', [])
    for team in data['teams']:
        team.setdefault('status', REGISTRATION_PENDING)
    return data


def save_registrations(slug: str, registrations: dict):
    """Save team registrations."""
    _save_yaml(_file_path(slug, 'registrations.yaml'), registrations)


def approved_teams(slug: str) -> list:
    """Teams whose registration is approved, in registration order."""
    return [
        Team(reg['team_id'], reg.get('team_name'))
        for reg in load_registrations(slug)['teams']
        if reg.get('status') == REGISTRATION_APPROVED
    ]


def load_fixtures(slug: str) -> list:
    """Load stored fixtures. A damaged fixtures file raises yaml.YAMLError."""
    data = _load_yaml(_file_path(slug, 'fixtures.yaml'), strict=True)
    if not data:
        return []
    return [Fixture.from_dict(item) for item in data.get('fixtures', [])]


def save_fixtures(slug: str, fixtures: list):
    """Save fixtures."""
    _save_yaml(_file_path(slug, 'fixtures.yaml'), {'fixtures': [f.to_dict() for f in fixtures]})


def _is_scheduled(slug: str) -> bool:
    return get_tournament(slug).get('status') == TOURNAMENT_SCHEDULED


def _registration_locked():
    return jsonify({'success': False,
                    'error': 'Registrations are locked once fixtures are scheduled.'}), 409


def _team_names(slug: str) -> dict:
    return {reg['team_id']: reg.get('team_name', reg['team_id'])
            for reg in load_registrations(slug)['teams']}


@app.errorhandler(yaml.YAMLError)
def handle_damaged_data(e):
    """Refuse to act on data files that no longer parse."""
    app.logger.error(f'Damaged data file: {e}')
    return jsonify({'success': False, 'error': 'Stored tournament data could not be read.'}), 500


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments."""
    return jsonify({'success': True, 'tournaments': load_tournaments()['tournaments']})


@app.route('/api/tournaments/create', methods=['POST'])
def api_create_tournament():
    """Create a new tournament in the enrolling state."""
    name = (request.get_json(silent=True) or {}).get('name', '').strip()
    if not name:
        return jsonify({'success': False, 'error': 'Tournament name is required.'}), 400

    slug = _slugify(name)
    with _data_lock():
        data = load_tournaments()
        if any(t['slug'] == slug for t in data['tournaments']):
            return jsonify({'success': False,
                            'error': f'A tournament with a similar name already exists ("{slug}").'}), 400

        settings = get_default_settings()
        settings['tournament_name'] = name
        save_settings(slug, settings)
        save_registrations(slug, {'registration_open': False, 'teams': []})

        data['tournaments'].append({
            'slug': slug,
            'name': name,
            'status': TOURNAMENT_ENROLLING,
            'created': datetime.now().isoformat()
        })
        save_tournaments(data)

    app.logger.info(f'Created tournament {slug}')
    return jsonify({'success': True, 'slug': slug, 'status': TOURNAMENT_ENROLLING})


@app.route('/api/tournaments/<slug>/settings', methods=['GET', 'POST'])
def api_settings(slug):
    """Read or update tournament settings."""
    get_tournament(slug)
    if request.method == 'GET':
        return jsonify({'success': True, 'settings': load_settings(slug)})

    updates = request.get_json(silent=True) or {}
    if not isinstance(updates, dict):
        return jsonify({'success': False, 'error': 'Settings must be a JSON object.'}), 400
    errors = validate_settings(updates)
    if errors:
        return jsonify({'success': False, 'error': '; '.join(errors)}), 400

    with _data_lock():
        settings = load_settings(slug)
        settings.update(updates)
        save_settings(slug, settings)
    return jsonify({'success': True, 'settings': settings})


@app.route('/api/tournaments/<slug>/registrations/toggle', methods=['POST'])
def api_toggle_registration(slug):
    """Toggle registration open/closed status."""
    get_tournament(slug)
    with _data_lock():
        if _is_scheduled(slug):
            return _registration_locked()
        registrations = load_registrations(slug)
        registrations['registration_open'] = not registrations.get('registration_open', False)
        save_registrations(slug, registrations)
    return jsonify({'success': True, 'registration_open': registrations['registration_open']})


@app.route('/api/tournaments/<slug>/register', methods=['POST'])
def api_register_team(slug):
    """Register a team for a tournament. New registrations start pending."""
    get_tournament(slug)
    data = request.get_json(silent=True) or {}
    team_name = data.get('team_name', '').strip()
    team_id = str(data.get('team_id') or '').strip() or _slugify(team_name)

    if not team_name:
        return jsonify({'success': False, 'error': 'Team name is required.'}), 400

    with _data_lock():
        if _is_scheduled(slug):
            return _registration_locked()
        registrations = load_registrations(slug)
        if not registrations.get('registration_open', False):
            return jsonify({'success': False, 'error': 'Registration is currently closed.'}), 400

        for reg in registrations['teams']:
            if reg['team_id'] == team_id or reg.get('team_name') == team_name:
                return jsonify({'success': False, 'error': 'This team is already registered.'}), 400

        registrations['teams'].append({
            'team_id': team_id,
            'team_name': team_name,
            'status': REGISTRATION_PENDING,
            'registered_at': datetime.now().isoformat()
        })
        save_registrations(slug, registrations)

    return jsonify({'success': True, 'team_id': team_id, 'status': REGISTRATION_PENDING})


@app.route('/api/tournaments/<slug>/registrations', methods=['GET'])
def api_list_registrations(slug):
    """List registrations of a tournament."""
    get_tournament(slug)
    return jsonify({'success': True, **load_registrations(slug)})


@app.route('/api/tournaments/<slug>/registrations/status', methods=['POST'])
def api_registration_status(slug):
    """Approve, reject or reset a registration (organizer only)."""
    get_tournament(slug)
    data = request.get_json(silent=True) or {}
    team_id = str(data.get('team_id', '')).strip()
    status = data.get('status', '').strip()

    if not team_id:
        return jsonify({'success': False, 'error': 'Team id is required.'}), 400
    if status not in REGISTRATION_STATUSES:
        return jsonify({'success': False, 'error': f'Invalid status "{status}".'}), 400

    with _data_lock():
        if _is_scheduled(slug):
            return _registration_locked()
        registrations = load_registrations(slug)
        reg = next((r for r in registrations['teams'] if r['team_id'] == team_id), None)
        if not reg:
            return jsonify({'success': False, 'error': 'Registration not found.'}), 404
        reg['status'] = status
        if status == REGISTRATION_APPROVED:
            reg['approved_at'] = datetime.now().isoformat()
        save_registrations(slug, registrations)

    return jsonify({'success': True, 'team_id': team_id, 'status': status})


@app.route('/api/tournaments/<slug>/fixtures/generate', methods=['POST'])
def api_generate_fixtures(slug):
    """Generate the round-robin fixtures and mark the tournament scheduled.

    Everything happens under the data lock: reading approved teams, checking
    for existing fixtures, writing the fixtures and flipping the status. On
    any generation error nothing is written.
    """
    get_tournament(slug)
    app.logger.info(f'Generating fixtures for tournament {slug}')

    with _data_lock():
        teams = approved_teams(slug)
        app.logger.info(f'Found {len(teams)} approved teams for {slug}')
        try:
            if _is_scheduled(slug):
                raise AlreadyScheduledError(slug)
            result = generate_fixtures(
                teams, slug,
                existing_fixtures=load_fixtures(slug),
                settings=load_settings(slug),
            )
        except AlreadyScheduledError as e:
            app.logger.warning(f'Fixture generation refused for {slug}: {e}')
            return jsonify({'success': False, 'error': str(e)}), 409
        except FixtureGenerationError as e:
            app.logger.warning(f'Fixture generation refused for {slug}: {e}')
            return jsonify({'success': False, 'error': str(e)}), 400
        except (TypeError, ValueError) as e:
            app.logger.warning(f'Invalid scheduling settings for {slug}: {e}')
            return jsonify({'success': False, 'error': f'Invalid settings: {e}'}), 400

        save_fixtures(slug, result.fixtures)
        set_tournament_status(slug, TOURNAMENT_SCHEDULED)
        registrations = load_registrations(slug)
        registrations['registration_open'] = False
        save_registrations(slug, registrations)

    app.logger.info(f'Generated {result.fixtures_created} fixtures over {result.match_days} match days for {slug}')
    return jsonify({
        'success': True,
        'fixtures_created': result.fixtures_created,
        'match_days': result.match_days,
        'status': TOURNAMENT_SCHEDULED,
    })


@app.route('/api/tournaments/<slug>/fixtures', methods=['GET'])
def api_list_fixtures(slug):
    """Fixtures grouped by match day, with team names and byes."""
    tournament = get_tournament(slug)
    fixtures = load_fixtures(slug)
    names = _team_names(slug)
    byes = byes_by_round(fixtures, scheduled_team_ids(fixtures)) if fixtures else {}

    match_days = {}
    for fixture in fixtures:
        entry = fixture.to_dict()
        entry['home_team_name'] = names.get(fixture.home_team_id, fixture.home_team_id)
        entry['away_team_name'] = names.get(fixture.away_team_id, fixture.away_team_id)
        match_days.setdefault(fixture.match_day, []).append(entry)

    return jsonify({
        'success': True,
        'status': tournament.get('status', TOURNAMENT_ENROLLING),
        'match_days': [
            {'match_day': day, 'fixtures': match_days[day], 'byes': byes.get(day, [])}
            for day in sorted(match_days)
        ],
    })


@app.route('/api/tournaments/<slug>/fixtures.csv', methods=['GET'])
def api_export_fixtures_csv(slug):
    """Export the fixtures as a downloadable CSV file."""
    get_tournament(slug)
    fixtures = load_fixtures(slug)
    if not fixtures:
        return jsonify({'success': False, 'error': 'No fixtures found'}), 404

    names = _team_names(slug)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['Match Day', 'Kickoff', 'Home', 'Away', 'Status'])
    for fixture in fixtures:
        writer.writerow([
            fixture.match_day,
            fixture.kickoff or '',
            names.get(fixture.home_team_id, fixture.home_team_id),
            names.get(fixture.away_team_id, fixture.away_team_id),
            fixture.status,
        ])

    csv_content = output.getvalue()
    output.close()

    return Response(
        csv_content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={slug}-fixtures.csv'},
    )


if __name__ == '__main__':
    app.run(debug=True, port=5000)

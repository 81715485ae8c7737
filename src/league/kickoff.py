"""
Kickoff planning for generated fixtures.

Match days fall on a fixed weekday, a fixed number of days apart. Inside a
match day kickoffs are spaced evenly from the first slot and wrap back to it
once they would pass the last slot.
"""
from datetime import date, datetime, time, timedelta
from typing import List

from league.models import Fixture


DEFAULT_KICKOFF_SETTINGS = {
    'lead_days': 7,
    'match_weekday': 6,  # Sunday
    'match_day_interval_days': 7,
    'first_kickoff': '15:00',
    'last_kickoff': '21:00',
    'kickoff_spacing_minutes': 120,
}


def _parse_time(time_str: str) -> time:
    return datetime.strptime(str(time_str), '%H:%M').time()


def first_match_date(start: date, lead_days: int = 7, match_weekday: int = 6) -> date:
    """First date on the given weekday that is at least lead_days after start."""
    if not 0 <= match_weekday <= 6:
        raise ValueError(f'match_weekday must be between 0 and 6, got {match_weekday}')
    earliest = start + timedelta(days=lead_days)
    return earliest + timedelta(days=(match_weekday - earliest.weekday()) % 7)


def kickoff_times(count: int, first: time, last: time, spacing_minutes: int) -> List[time]:
    """Kickoff times for count matches on the same day."""
    if spacing_minutes <= 0:
        raise ValueError('kickoff_spacing_minutes must be positive')
    if last < first:
        raise ValueError('last_kickoff must not be earlier than first_kickoff')
    first_minutes = first.hour * 60 + first.minute
    last_minutes = last.hour * 60 + last.minute
    times = []
    current = first_minutes
    for _ in range(count):
        times.append(time(current // 60, current % 60))
        current += spacing_minutes
        if current > last_minutes:
            current = first_minutes
    return times


def plan_kickoffs(fixtures: List[Fixture], start: datetime, settings: dict = None) -> List[Fixture]:
    """Stamp each fixture with a kickoff, in place. Returns the same list."""
    config = {**DEFAULT_KICKOFF_SETTINGS, **(settings or {})}
    start_date = start.date() if isinstance(start, datetime) else start
    opening_day = first_match_date(start_date, int(config['lead_days']), int(config['match_weekday']))
    interval = timedelta(days=int(config['match_day_interval_days']))
    first = _parse_time(config['first_kickoff'])
    last = _parse_time(config['last_kickoff'])
    spacing = int(config['kickoff_spacing_minutes'])

    by_day = {}
    for fixture in fixtures:
        by_day.setdefault(fixture.match_day, []).append(fixture)

    for match_day, day_fixtures in by_day.items():
        match_date = opening_day + interval * (match_day - 1)
        for fixture, kickoff in zip(day_fixtures, kickoff_times(len(day_fixtures), first, last, spacing)):
            fixture.kickoff = datetime.combine(match_date, kickoff).isoformat()
    return fixtures

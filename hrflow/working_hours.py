"""Working-hours rules: which days and times an employee may check in."""
from datetime import datetime

import pytz

from hrflow.errors import ValidationError

# Day numbers follow the stored convention: 0=Sunday, 1=Monday, ..., 6=Saturday
DAYS_OF_WEEK = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

DEFAULT_WORKING_HOURS = {
    'start_time': '09:30',
    'end_time': '17:00',
    'work_days': [2, 3, 4, 5, 6, 0],  # Tuesday to Sunday, Monday off
    'break_duration': 60,
    'is_active': True,
}


def get_timezone(tz_name):
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ValidationError(f'Unknown timezone: {tz_name}')


def local_now(tz_name):
    """Current time in the configured timezone"""
    return datetime.now(get_timezone(tz_name))


def parse_time(value):
    """Convert 'HH:MM' into minutes since midnight"""
    try:
        hour, minute = (int(part) for part in str(value).split(':'))
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid time "{value}", expected HH:MM')
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValidationError(f'Invalid time "{value}", expected HH:MM')
    return hour * 60 + minute


def parse_work_days(value):
    """Accept a list of day numbers or the stored comma separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(',') if part.strip()]
    else:
        parts = list(value)

    days = []
    for part in parts:
        try:
            day = int(part)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid work day "{part}"')
        if not 0 <= day <= 6:
            raise ValidationError(f'Work day {day} must be between 0 (Sunday) and 6 (Saturday)')
        if day not in days:
            days.append(day)
    return days


def _setting(hours, key):
    if hours is None:
        return DEFAULT_WORKING_HOURS[key]
    if isinstance(hours, dict):
        return hours.get(key, DEFAULT_WORKING_HOURS[key])
    return getattr(hours, key)


def day_number(moment):
    return moment.isoweekday() % 7


def minutes_of_day(moment):
    return moment.hour * 60 + moment.minute


def is_working_day(moment, hours=None):
    return day_number(moment) in parse_work_days(_setting(hours, 'work_days'))


def is_working_hours(moment, hours=None):
    start = parse_time(_setting(hours, 'start_time'))
    end = parse_time(_setting(hours, 'end_time'))
    return start <= minutes_of_day(moment) <= end


def get_working_status(moment, hours=None):
    """Describe where ``moment`` sits relative to the working schedule"""
    start_time = _setting(hours, 'start_time')
    end_time = _setting(hours, 'end_time')

    if not is_working_day(moment, hours):
        return {
            'status': 'off-day',
            'message': 'Today is an off day',
            'can_check_in': False,
        }

    if is_working_hours(moment, hours):
        return {
            'status': 'working-hours',
            'message': 'Currently in working hours',
            'can_check_in': True,
        }

    if minutes_of_day(moment) < parse_time(start_time):
        return {
            'status': 'before-hours',
            'message': f'Work starts at {start_time}',
            'can_check_in': False,
        }
    return {
        'status': 'after-hours',
        'message': f'Work ended at {end_time}',
        'can_check_in': False,
    }


def format_working_hours(hours=None):
    names = [DAYS_OF_WEEK[day] for day in parse_work_days(_setting(hours, 'work_days'))]
    return f"{_setting(hours, 'start_time')} - {_setting(hours, 'end_time')}, {', '.join(names)}"


def standard_daily_hours(hours=None):
    """Scheduled span from start to end of the working day, in hours"""
    span = parse_time(_setting(hours, 'end_time')) - parse_time(_setting(hours, 'start_time'))
    return round(span / 60, 2)


def validate_schedule(start_time, end_time):
    if parse_time(end_time) <= parse_time(start_time):
        raise ValidationError('End time must be after start time')

"""Attendance statistics and CSV export."""
import csv
from datetime import timedelta
from io import StringIO

from hrflow.working_hours import is_working_day, minutes_of_day, parse_time

ATTENDED_STATUSES = ('present', 'late')


def date_range(start_date, end_date):
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def holiday_dates(holidays):
    return {holiday.date for holiday in holidays if holiday.is_active is not False}


def working_dates(start_date, end_date, hours=None, holidays=()):
    """Scheduled work days in the range, minus active holidays"""
    skipped = holiday_dates(holidays)
    return [day for day in date_range(start_date, end_date)
            if is_working_day(day, hours) and day not in skipped]


def _hours(value):
    return float(value or 0)


def _percent(part, whole):
    return round(part / whole * 100, 2) if whole else 0


def calculate_attendance_stats(records, start_date, end_date, hours=None, holidays=()):
    """
    Summarise attendance over a period.

    Only scheduled working days that are not holidays count. A day is
    attended when its record is present or late; a check-in after the start
    time is late and a check-out before the end time is an early departure.
    """
    days = working_dates(start_date, end_date, hours, holidays)
    start_minutes = parse_time(getattr(hours, 'start_time', None) or '09:30')
    end_minutes = parse_time(getattr(hours, 'end_time', None) or '17:00')
    break_minutes = getattr(hours, 'break_duration', None)
    if break_minutes is None:
        break_minutes = 60

    by_date = {}
    for record in records:
        by_date.setdefault(record.date, record)

    present = absent = late = early = 0
    total_hours = total_overtime = 0.0
    total_break = 0
    for day in days:
        record = by_date.get(day)
        if record is None or record.status not in ATTENDED_STATUSES:
            absent += 1
            continue

        present += 1
        total_hours += _hours(record.hours_worked)
        total_overtime += _hours(record.overtime_hours)
        total_break += break_minutes
        if record.check_in and minutes_of_day(record.check_in) > start_minutes:
            late += 1
        if record.check_out and minutes_of_day(record.check_out) < end_minutes:
            early += 1

    return {
        'period': {'start_date': start_date.isoformat(), 'end_date': end_date.isoformat()},
        'working_days': len(days),
        'present_days': present,
        'absent_days': absent,
        'late_days': late,
        'early_departures': early,
        'total_hours': round(total_hours, 2),
        'total_overtime_hours': round(total_overtime, 2),
        'avg_hours_per_day': round(total_hours / present, 2) if present else 0,
        'total_break_hours': round(total_break / 60),
        'attendance_rate': _percent(present, len(days)),
        'punctuality_rate': _percent(present - late, present),
        'productivity': {
            'on_time_ratio': _percent(present - late - early, present),
            'overtime_ratio': _percent(total_overtime, total_hours),
        },
    }


def attendance_csv(records):
    """Render attendance rows for download"""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(['Employee Name', 'Date', 'Status', 'Check In', 'Check Out',
                     'Hours Worked', 'Overtime Hours', 'Location'])
    for record in records:
        writer.writerow([
            record.employee.name if record.employee else '',
            record.date.isoformat(),
            record.status.replace('_', ' ').title(),
            record.check_in.strftime('%H:%M') if record.check_in else 'N/A',
            record.check_out.strftime('%H:%M') if record.check_out else 'N/A',
            f'{_hours(record.hours_worked):.2f}',
            f'{_hours(record.overtime_hours):.2f}',
            record.location or '',
        ])
    return output.getvalue()


def employee_summary(employee, records, requests):
    return {
        'employee': {
            'id': employee.id,
            'name': employee.name,
            'email': employee.email,
            'department': employee.department,
            'position': employee.position,
        },
        'attendance': {
            'total_days': len(records),
            'total_hours': round(sum(_hours(r.hours_worked) for r in records), 2),
            'total_overtime_hours': round(sum(_hours(r.overtime_hours) for r in records), 2),
            'present_days': sum(1 for r in records if r.status == 'present'),
            'absent_days': sum(1 for r in records if r.status == 'absent'),
            'late_days': sum(1 for r in records if r.status == 'late'),
            'leave_days': sum(1 for r in records if r.status == 'on_leave'),
        },
        'requests': {
            'total': len(requests),
            'pending': sum(1 for r in requests if r.status == 'pending'),
            'approved': sum(1 for r in requests if r.status == 'approved'),
            'rejected': sum(1 for r in requests if r.status == 'rejected'),
        },
    }

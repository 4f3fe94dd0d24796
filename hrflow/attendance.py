"""Attendance bookkeeping: check-in/out records and request side effects."""
import logging
from datetime import datetime, time
from decimal import Decimal

from flask import current_app

from hrflow import working_hours
from hrflow.checkin import evaluate_checkin, evaluate_checkout
from hrflow.errors import Conflict, PermissionDenied
from hrflow.geofence import format_location
from hrflow.models import Attendance, CheckinZone, SystemSettings, WorkingHours, db
from hrflow.reports import date_range

logger = logging.getLogger(__name__)


class CheckInDenied(PermissionDenied):
    def __init__(self, decision):
        super().__init__(decision.reasons[0], errors=decision.reasons)
        self.decision = decision

    def to_dict(self):
        payload = super().to_dict()
        payload['decision'] = self.decision.to_dict()
        return payload


def configured_timezone():
    settings = SystemSettings.query.first()
    if settings and settings.timezone:
        return settings.timezone
    return current_app.config['HRFLOW_TIMEZONE']


def current_time():
    return working_hours.local_now(configured_timezone())


def wall_clock(moment):
    """Timestamps are stored as naive local time"""
    return moment.replace(tzinfo=None, microsecond=0)


def active_working_hours():
    return WorkingHours.query.filter_by(is_active=True).order_by(WorkingHours.id.asc()).first()


def ordered_zones():
    # Zone id order decides which zone is reported when several match
    return CheckinZone.query.order_by(CheckinZone.id.asc()).all()


def attendance_for(user_id, day):
    return Attendance.query.filter_by(user_id=user_id, date=day).first()


def hours_between(start, end):
    return round(Decimal(str((end - start).total_seconds() / 3600)), 2)


def check_in(employee, latitude, longitude, moment=None):
    """Record today's check-in after re-validating schedule and geofence"""
    moment = moment or current_time()
    decision = evaluate_checkin(moment, latitude, longitude, ordered_zones(), active_working_hours())
    if not decision.allowed:
        logger.info(f"Check-in denied for {employee.username}: {'; '.join(decision.reasons)}")
        raise CheckInDenied(decision)

    today = moment.date()
    record = attendance_for(employee.id, today)
    if record and record.check_in:
        raise Conflict('Already checked in today')

    if record is None:
        record = Attendance(user_id=employee.id, date=today)
        db.session.add(record)

    record.check_in = wall_clock(moment)
    record.check_out = None
    record.latitude = float(latitude)
    record.longitude = float(longitude)
    record.location = format_location(latitude, longitude)
    record.status = 'present'
    record.hours_worked = Decimal('0.00')
    record.overtime_hours = Decimal('0.00')
    record.notes = f'Checked in at {decision.zone_name}'
    db.session.commit()

    logger.info(f"{employee.username} checked in at {decision.zone_name}")
    return record, decision


def check_out(employee, latitude, longitude, moment=None):
    moment = moment or current_time()
    decision = evaluate_checkout(latitude, longitude, ordered_zones())
    if not decision.allowed:
        logger.info(f"Check-out denied for {employee.username}: outside all zones")
        raise CheckInDenied(decision)

    record = attendance_for(employee.id, moment.date())
    if record is None or record.check_in is None:
        raise Conflict('Must check in first')
    if record.check_out:
        raise Conflict('Already checked out today')

    threshold = Decimal(str(current_app.config['OVERTIME_THRESHOLD_HOURS']))
    record.check_out = wall_clock(moment)
    record.hours_worked = hours_between(record.check_in, record.check_out)
    record.overtime_hours = max(Decimal('0.00'), record.hours_worked - threshold)
    record.location = format_location(latitude, longitude)
    record.notes = f'{record.notes}; checked out at {decision.zone_name}' if record.notes \
        else f'Checked out at {decision.zone_name}'
    db.session.commit()

    logger.info(f"{employee.username} checked out after {record.hours_worked} hours")
    return record, decision


def apply_request_approval(request_record):
    """Write the attendance rows an approved request implies"""
    if request_record.type == 'attendance_adjustment':
        _apply_attendance_adjustment(request_record)
    elif request_record.type == 'leave':
        _apply_leave(request_record)


def _apply_attendance_adjustment(request_record):
    hours = active_working_hours()
    start_time = hours.start_time if hours else working_hours.DEFAULT_WORKING_HOURS['start_time']
    end_time = hours.end_time if hours else working_hours.DEFAULT_WORKING_HOURS['end_time']
    standard = Decimal(str(working_hours.standard_daily_hours(hours)))
    note = f'Approved via attendance adjustment request #{request_record.id}'

    day = request_record.start_date
    record = attendance_for(request_record.user_id, day)
    if record is None:
        start_minutes = working_hours.parse_time(start_time)
        end_minutes = working_hours.parse_time(end_time)
        record = Attendance(
            user_id=request_record.user_id,
            date=day,
            check_in=_at(day, start_minutes),
            check_out=_at(day, end_minutes),
            location='Office (Attendance Adjustment)',
        )
        db.session.add(record)

    record.status = 'present'
    record.hours_worked = standard
    record.overtime_hours = Decimal('0')
    record.notes = note
    logger.info(f"Attendance adjusted for user {request_record.user_id} on {day} via request #{request_record.id}")


def _apply_leave(request_record):
    hours = active_working_hours()
    note = f'Approved leave: {request_record.reason} (Request #{request_record.id})'
    for day in date_range(request_record.start_date, request_record.last_date):
        if not working_hours.is_working_day(day, hours):
            continue
        record = attendance_for(request_record.user_id, day)
        if record is None:
            record = Attendance(user_id=request_record.user_id, date=day, location='N/A (On Leave)')
            db.session.add(record)
        record.status = 'on_leave'
        record.hours_worked = Decimal('0')
        record.overtime_hours = Decimal('0')
        record.notes = note


def _at(day, minutes):
    return datetime.combine(day, time(minutes // 60, minutes % 60))

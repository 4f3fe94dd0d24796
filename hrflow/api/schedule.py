"""Working hours and holiday calendar."""
import logging

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from hrflow.api import get_or_404, json_body, validated
from hrflow.attendance import active_working_hours
from hrflow.auth import hr_required
from hrflow.forms import HolidayForm, WorkingHoursForm
from hrflow.models import Holiday, WorkingHours, db
from hrflow.working_hours import DEFAULT_WORKING_HOURS, format_working_hours, parse_work_days, validate_schedule

logger = logging.getLogger(__name__)

schedule_bp = Blueprint('schedule', __name__, url_prefix='/api')


def _working_hours_form(payload, defaults):
    payload = dict(payload)
    if isinstance(payload.get('work_days'), str):
        payload['work_days'] = parse_work_days(payload['work_days'])
    form = validated(WorkingHoursForm, payload, defaults=defaults, message='Invalid working hours data')
    validate_schedule(form.start_time.data, form.end_time.data)
    return form


def _apply_hours(hours, form):
    hours.start_time = form.start_time.data
    hours.end_time = form.end_time.data
    hours.work_days = ','.join(str(day) for day in parse_work_days(form.work_days.data))
    hours.break_duration = form.break_duration.data
    hours.is_active = form.is_active.data


@schedule_bp.route('/working-hours', methods=['GET'])
@login_required
def list_working_hours():
    rows = WorkingHours.query.order_by(WorkingHours.id.asc()).all()
    active = active_working_hours()
    return jsonify({
        'success': True,
        'working_hours': [row.to_dict() for row in rows],
        'active': active.to_dict() if active else dict(DEFAULT_WORKING_HOURS),
        'summary': format_working_hours(active),
    })


@schedule_bp.route('/working-hours', methods=['POST'])
@hr_required
def create_working_hours():
    defaults = dict(DEFAULT_WORKING_HOURS)
    form = _working_hours_form(json_body(), defaults)
    hours = WorkingHours(created_by=current_user.id)
    _apply_hours(hours, form)
    db.session.add(hours)
    db.session.commit()

    logger.info(f"{current_user.username} created working hours {format_working_hours(hours)}")
    return jsonify({'success': True, 'working_hours': hours.to_dict()}), 201


@schedule_bp.route('/working-hours/<int:hours_id>', methods=['PUT'])
@hr_required
def update_working_hours(hours_id):
    hours = get_or_404(WorkingHours, hours_id, 'Working hours')
    form = _working_hours_form(json_body(), hours.to_dict())
    _apply_hours(hours, form)
    db.session.commit()

    logger.info(f"{current_user.username} updated working hours #{hours.id}")
    return jsonify({'success': True, 'working_hours': hours.to_dict()})


@schedule_bp.route('/working-hours/<int:hours_id>', methods=['DELETE'])
@hr_required
def delete_working_hours(hours_id):
    hours = get_or_404(WorkingHours, hours_id, 'Working hours')
    db.session.delete(hours)
    db.session.commit()

    logger.info(f"{current_user.username} deleted working hours #{hours_id}")
    return jsonify({'success': True, 'message': 'Working hours deleted'})


@schedule_bp.route('/holidays', methods=['GET'])
@login_required
def list_holidays():
    holidays = Holiday.query.order_by(Holiday.date.asc()).all()
    return jsonify({'success': True, 'holidays': [holiday.to_dict() for holiday in holidays]})


@schedule_bp.route('/holidays', methods=['POST'])
@hr_required
def create_holiday():
    form = validated(HolidayForm, json_body(), defaults={'is_active': True}, message='Invalid holiday')
    holiday = Holiday(name=form.name.data, date=form.date.data, is_active=form.is_active.data)
    db.session.add(holiday)
    db.session.commit()

    logger.info(f"{current_user.username} added holiday {holiday.name} on {holiday.date}")
    return jsonify({'success': True, 'holiday': holiday.to_dict()}), 201


@schedule_bp.route('/holidays/<int:holiday_id>', methods=['PUT'])
@hr_required
def update_holiday(holiday_id):
    holiday = get_or_404(Holiday, holiday_id, 'Holiday')
    form = validated(HolidayForm, json_body(), defaults=holiday.to_dict(), message='Invalid holiday')
    holiday.name = form.name.data
    holiday.date = form.date.data
    holiday.is_active = form.is_active.data
    db.session.commit()
    return jsonify({'success': True, 'holiday': holiday.to_dict()})


@schedule_bp.route('/holidays/<int:holiday_id>', methods=['DELETE'])
@hr_required
def delete_holiday(holiday_id):
    holiday = get_or_404(Holiday, holiday_id, 'Holiday')
    db.session.delete(holiday)
    db.session.commit()

    logger.info(f"{current_user.username} deleted holiday {holiday.name}")
    return jsonify({'success': True, 'message': 'Holiday deleted'})

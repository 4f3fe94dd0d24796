"""HR dashboard, employee reports, notifications and system settings."""
import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from hrflow.api import date_arg, json_body, validated
from hrflow.attendance import current_time
from hrflow.auth import hr_required
from hrflow.errors import ValidationError
from hrflow.forms import SystemSettingsForm
from hrflow.models import Attendance, Employee, Request, SystemSettings, db, default_settings
from hrflow.notifications import request_notifications
from hrflow.reports import employee_summary
from hrflow.working_hours import get_timezone

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api')


@dashboard_bp.route('/dashboard/stats')
@hr_required
def dashboard_stats():
    today = current_time().date()
    today_records = Attendance.query.filter_by(date=today).all()
    return jsonify({
        'success': True,
        'date': today.isoformat(),
        'total_employees': Employee.query.filter_by(role='employee', is_active=True).count(),
        'present_today': sum(1 for record in today_records if record.status in ('present', 'late')),
        'on_leave': sum(1 for record in today_records if record.status == 'on_leave'),
        'pending_requests': Request.query.filter_by(status='pending').count(),
    })


@dashboard_bp.route('/reports/employees')
@hr_required
def employee_reports():
    start_date = date_arg('start_date')
    end_date = date_arg('end_date')
    if start_date and end_date and end_date < start_date:
        raise ValidationError('End date cannot be before start date.')

    report = []
    for employee in Employee.query.filter_by(role='employee').order_by(Employee.name.asc()).all():
        query = Attendance.query.filter(Attendance.user_id == employee.id)
        if start_date:
            query = query.filter(Attendance.date >= start_date)
        if end_date:
            query = query.filter(Attendance.date <= end_date)
        requests = Request.query.filter_by(user_id=employee.id).all()
        report.append(employee_summary(employee, query.all(), requests))

    return jsonify({'success': True, 'report': report})


@dashboard_bp.route('/notifications')
@login_required
def notifications():
    since = request.args.get('since')
    if since:
        try:
            since = datetime.fromisoformat(since)
        except ValueError:
            raise ValidationError(f'Invalid since "{since}", expected an ISO timestamp')
        since = since.replace(tzinfo=None)

    reviewed = Request.query.filter(
        Request.user_id == current_user.id,
        Request.status.in_(['approved', 'rejected']),
        Request.reviewed_at.isnot(None),
    ).all()
    items = request_notifications(reviewed, since or None)
    return jsonify({
        'success': True,
        'notifications': items,
        'unread': sum(1 for item in items if not item['read']),
    })


@dashboard_bp.route('/settings', methods=['GET'])
def get_settings():
    settings = SystemSettings.query.first()
    if settings is None:
        return jsonify({'success': True, 'settings': default_settings(current_app.config['HRFLOW_TIMEZONE'])})
    return jsonify({'success': True, 'settings': settings.to_dict()})


@dashboard_bp.route('/settings', methods=['PUT'])
@hr_required
def update_settings():
    settings = SystemSettings.query.first()
    defaults = settings.to_dict() if settings else default_settings(current_app.config['HRFLOW_TIMEZONE'])
    form = validated(SystemSettingsForm, json_body(), defaults=defaults, message='Invalid settings')
    get_timezone(form.timezone.data)

    if settings is None:
        settings = SystemSettings()
        db.session.add(settings)
    for key in SystemSettings.EDITABLE:
        value = getattr(form, key).data
        setattr(settings, key, value if value != '' else None)
    settings.updated_by = current_user.id
    db.session.commit()

    logger.info(f"{current_user.username} updated system settings")
    return jsonify({'success': True, 'settings': settings.to_dict()})

import logging

from flask import Blueprint, current_app, jsonify, make_response, request
from flask_login import current_user, login_required

from hrflow import attendance as attendance_service
from hrflow.api import date_arg, get_or_404, json_body, parse_date, validated
from hrflow.auth import hr_required
from hrflow.checkin import evaluate_checkin
from hrflow.errors import Conflict, PermissionDenied, ValidationError
from hrflow.forms import AttendanceForm, LocationForm
from hrflow.geofence import validate_coordinates
from hrflow.models import Attendance, Employee, Holiday, db
from hrflow.reports import attendance_csv, calculate_attendance_stats
from hrflow.working_hours import format_working_hours, get_working_status

logger = logging.getLogger(__name__)

attendance_bp = Blueprint('attendance', __name__, url_prefix='/api/attendance')


def _visible_user_id(requested):
    """HR may look at anyone; employees only at themselves"""
    if current_user.is_hr:
        return requested
    if requested is not None and requested != current_user.id:
        raise PermissionDenied('You can only access your own attendance')
    return current_user.id


def _filtered_records():
    query = Attendance.query
    user_id = _visible_user_id(request.args.get('user_id', type=int))
    if user_id is not None:
        query = query.filter(Attendance.user_id == user_id)

    day = date_arg('date')
    if day:
        query = query.filter(Attendance.date == day)
    else:
        start_date = date_arg('start_date')
        end_date = date_arg('end_date')
        if start_date:
            query = query.filter(Attendance.date >= start_date)
        if end_date:
            query = query.filter(Attendance.date <= end_date)
    return query.order_by(Attendance.date.desc(), Attendance.id.desc()).all()


@attendance_bp.route('', methods=['GET'])
@login_required
def list_attendance():
    records = _filtered_records()
    return jsonify({
        'success': True,
        'attendance': [record.to_dict(with_employee=current_user.is_hr) for record in records],
    })


@attendance_bp.route('/status')
@login_required
def attendance_status():
    """Polled by the employee portal: schedule, today's record and, with a location, the gate"""
    moment = attendance_service.current_time()
    hours = attendance_service.active_working_hours()
    record = attendance_service.attendance_for(current_user.id, moment.date())

    payload = {
        'success': True,
        'now': attendance_service.wall_clock(moment).isoformat(),
        'working_hours': format_working_hours(hours),
        'working_status': get_working_status(moment, hours),
        'attendance': record.to_dict() if record else None,
        'refresh_interval': current_app.config['PORTAL_REFRESH_INTERVAL'],
    }

    latitude = request.args.get('latitude')
    longitude = request.args.get('longitude')
    if latitude is not None and longitude is not None:
        latitude, longitude = validate_coordinates(latitude, longitude)
        decision = evaluate_checkin(moment, latitude, longitude,
                                    attendance_service.ordered_zones(), hours)
        payload['decision'] = decision.to_dict()
    return jsonify(payload)


@attendance_bp.route('/checkin', methods=['POST'])
@login_required
def checkin():
    form = validated(LocationForm, json_body(), message='Location is required')
    record, decision = attendance_service.check_in(current_user, form.latitude.data, form.longitude.data)
    return jsonify({
        'success': True,
        'message': f'Checked in at {decision.zone_name}',
        'attendance': record.to_dict(),
        'decision': decision.to_dict(),
    }), 201


@attendance_bp.route('/checkout', methods=['POST'])
@login_required
def checkout():
    form = validated(LocationForm, json_body(), message='Location is required')
    record, decision = attendance_service.check_out(current_user, form.latitude.data, form.longitude.data)
    return jsonify({
        'success': True,
        'message': f'Checked out after {float(record.hours_worked):.2f} hours',
        'attendance': record.to_dict(),
        'decision': decision.to_dict(),
    })


def _apply(record, form):
    record.date = form.date.data
    record.check_in = form.check_in.data
    record.check_out = form.check_out.data
    record.location = form.location.data or None
    record.status = form.status.data
    record.notes = form.notes.data or None

    hours_worked = form.hours_worked.data
    if hours_worked is None and record.check_in and record.check_out:
        if record.check_out < record.check_in:
            raise ValidationError('Check out cannot be before check in')
        hours_worked = attendance_service.hours_between(record.check_in, record.check_out)
    record.hours_worked = hours_worked or 0
    record.overtime_hours = form.overtime_hours.data or 0


def _ensure_free_day(user_id, day, exclude_id=None):
    query = Attendance.query.filter_by(user_id=user_id, date=day)
    if exclude_id is not None:
        query = query.filter(Attendance.id != exclude_id)
    if query.first():
        raise Conflict('An attendance record already exists for this employee and date')


@attendance_bp.route('', methods=['POST'])
@hr_required
def create_attendance():
    form = validated(AttendanceForm, json_body(), defaults={'status': 'present'},
                     message='Invalid attendance data')
    get_or_404(Employee, form.user_id.data, 'Employee')
    _ensure_free_day(form.user_id.data, form.date.data)

    record = Attendance(user_id=form.user_id.data)
    _apply(record, form)
    db.session.add(record)
    db.session.commit()

    logger.info(f"{current_user.username} recorded attendance for user {record.user_id} on {record.date}")
    return jsonify({'success': True, 'attendance': record.to_dict(with_employee=True)}), 201


@attendance_bp.route('/<int:attendance_id>', methods=['PUT'])
@hr_required
def update_attendance(attendance_id):
    record = get_or_404(Attendance, attendance_id, 'Attendance record')
    defaults = record.to_dict()
    payload = json_body()
    if 'check_in' in payload or 'check_out' in payload:
        # Times changed: recompute hours unless the caller sent them
        defaults.pop('hours_worked', None)
    form = validated(AttendanceForm, payload, defaults=defaults, message='Invalid attendance data')
    if form.user_id.data != record.user_id:
        raise ValidationError('Attendance cannot be moved to another employee')
    _ensure_free_day(record.user_id, form.date.data, exclude_id=record.id)

    _apply(record, form)
    db.session.commit()

    logger.info(f"{current_user.username} updated attendance #{record.id}")
    return jsonify({'success': True, 'attendance': record.to_dict(with_employee=True)})


@attendance_bp.route('/<int:attendance_id>', methods=['DELETE'])
@hr_required
def delete_attendance(attendance_id):
    record = get_or_404(Attendance, attendance_id, 'Attendance record')
    db.session.delete(record)
    db.session.commit()

    logger.info(f"{current_user.username} deleted attendance #{attendance_id}")
    return jsonify({'success': True, 'message': 'Attendance record deleted'})


@attendance_bp.route('/calculate', methods=['POST'])
@login_required
def calculate():
    payload = json_body()
    if not payload.get('start_date') or not payload.get('end_date'):
        raise ValidationError('start_date and end_date are required')
    start_date = parse_date(payload['start_date'], 'start_date')
    end_date = parse_date(payload['end_date'], 'end_date')
    if end_date < start_date:
        raise ValidationError('End date cannot be before start date.')

    try:
        requested = int(payload['user_id']) if payload.get('user_id') else None
    except (TypeError, ValueError):
        raise ValidationError('user_id must be a number')
    user_id = _visible_user_id(requested)
    if user_id is None:
        raise ValidationError('user_id is required')
    get_or_404(Employee, user_id, 'Employee')

    records = Attendance.query.filter(
        Attendance.user_id == user_id,
        Attendance.date >= start_date,
        Attendance.date <= end_date,
    ).all()
    holidays = Holiday.query.filter(Holiday.date >= start_date, Holiday.date <= end_date).all()
    stats = calculate_attendance_stats(records, start_date, end_date,
                                       hours=attendance_service.active_working_hours(), holidays=holidays)
    return jsonify({'success': True, 'user_id': user_id, 'stats': stats})


@attendance_bp.route('/export')
@login_required
def export_attendance():
    records = _filtered_records()
    filename = f"attendance_{attendance_service.current_time().strftime('%Y%m%d')}.csv"

    response = make_response(attendance_csv(records))
    response.headers['Content-Disposition'] = f'attachment; filename={filename}'
    response.headers['Content-type'] = 'text/csv'
    return response

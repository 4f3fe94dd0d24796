"""Leave, overtime and attendance adjustment requests."""
import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from hrflow.api import get_or_404, json_body, validated
from hrflow.attendance import apply_request_approval, current_time, wall_clock
from hrflow.auth import hr_required
from hrflow.errors import Conflict, PermissionDenied, ValidationError
from hrflow.forms import RequestForm, ReviewRequestForm
from hrflow.models import REQUEST_STATUSES, Request, db
from hrflow.notifications import send_request_status_email

logger = logging.getLogger(__name__)

requests_bp = Blueprint('requests', __name__, url_prefix='/api/requests')


def overlapping_leaves(user_id, start_date, end_date, exclude_id=None):
    """Pending or approved leave of ``user_id`` that shares a day with the range"""
    query = Request.query.filter(
        Request.user_id == user_id,
        Request.type == 'leave',
        Request.status.in_(['approved', 'pending']),
        Request.start_date <= end_date,
        db.func.coalesce(Request.end_date, Request.start_date) >= start_date,
    )
    if exclude_id is not None:
        query = query.filter(Request.id != exclude_id)
    return query.order_by(Request.start_date.asc()).all()


@requests_bp.route('', methods=['GET'])
@login_required
def list_requests():
    query = Request.query
    status = request.args.get('status')
    if status:
        if status not in REQUEST_STATUSES:
            raise ValidationError(f'Unknown status "{status}"')
        query = query.filter(Request.status == status)

    if current_user.is_hr:
        user_id = request.args.get('user_id', type=int)
        if user_id is not None:
            query = query.filter(Request.user_id == user_id)
    else:
        # Regular employees only see their own requests
        query = query.filter(Request.user_id == current_user.id)

    records = query.order_by(Request.created_at.desc(), Request.id.desc()).all()
    return jsonify({
        'success': True,
        'requests': [record.to_dict(with_employee=current_user.is_hr) for record in records],
    })


@requests_bp.route('', methods=['POST'])
@login_required
def create_request():
    form = validated(RequestForm, json_body(), message='Invalid request data')
    start_date = form.start_date.data
    end_date = form.end_date.data
    if end_date and end_date < start_date:
        raise ValidationError('End date cannot be before start date.')

    if form.type.data == 'leave':
        overlaps = overlapping_leaves(current_user.id, start_date, end_date or start_date)
        if overlaps:
            details = [f"{overlap.status.title()} leave from {overlap.start_date.isoformat()} "
                       f"to {overlap.last_date.isoformat()}" for overlap in overlaps]
            raise Conflict('Your leave request overlaps with existing leave(s)', errors=details)

    record = Request(
        user_id=current_user.id,
        type=form.type.data,
        start_date=start_date,
        end_date=end_date,
        reason=form.reason.data,
        notes=form.notes.data or None,
        status='pending',
        created_at=wall_clock(current_time()),
    )
    db.session.add(record)
    db.session.commit()

    logger.info(f"{current_user.username} submitted {record.type} request #{record.id}")
    return jsonify({'success': True, 'request': record.to_dict()}), 201


@requests_bp.route('/<int:request_id>/review', methods=['PUT'])
@hr_required
def review_request(request_id):
    record = get_or_404(Request, request_id, 'Request')
    if record.user_id == current_user.id:
        raise PermissionDenied('You cannot review your own requests.')
    if record.status != 'pending':
        raise Conflict(f'Request has already been {record.status}')

    form = validated(ReviewRequestForm, json_body(), message='Invalid review')
    record.status = form.status.data
    record.review_comment = form.review_comment.data or None
    record.reviewer_id = current_user.id
    record.reviewed_at = wall_clock(current_time())

    if record.status == 'approved':
        apply_request_approval(record)
    db.session.commit()

    logger.info(f"{current_user.username} {record.status} request #{record.id} of user {record.user_id}")
    send_request_status_email(record)
    return jsonify({'success': True, 'request': record.to_dict(with_employee=True)})


@requests_bp.route('/<int:request_id>', methods=['DELETE'])
@login_required
def delete_request(request_id):
    record = get_or_404(Request, request_id, 'Request')
    if record.user_id != current_user.id:
        raise PermissionDenied('You can only delete your own requests.')
    if record.status != 'pending':
        raise Conflict('Only pending requests can be deleted')

    db.session.delete(record)
    db.session.commit()

    logger.info(f"{current_user.username} withdrew request #{request_id}")
    return jsonify({'success': True, 'message': 'Request deleted'})

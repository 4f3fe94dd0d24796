import logging
import threading

import requests
from flask import current_app

logger = logging.getLogger(__name__)

SENDGRID_URL = 'https://api.sendgrid.com/v3/mail/send'
MAX_NOTIFICATIONS = 20


def send_email_sendgrid(to_email, subject, body, api_key, sender, sender_name):
    """Use SendGrid API with plain text formatting"""
    try:
        response = requests.post(
            SENDGRID_URL,
            headers={
                'Authorization': f'Bearer {api_key}',
                'Content-Type': 'application/json'
            },
            json={
                'personalizations': [{'to': [{'email': to_email}]}],
                'from': {'email': sender, 'name': sender_name},
                'subject': subject,
                'content': [{'type': 'text/plain', 'value': body}]
            },
            timeout=10
        )
    except requests.RequestException as e:
        logger.error(f"SendGrid request to {to_email} failed: {e}")
        return False

    if response.status_code == 202:
        logger.info(f"Email sent to {to_email} via SendGrid")
        return True
    logger.error(f"SendGrid error: {response.status_code} - {response.text}")
    return False


def send_email(to_email, subject, body):
    """Send an email, in a background thread unless MAIL_ASYNC is off"""
    config = current_app.config
    api_key = config.get('SENDGRID_API_KEY')
    if not api_key:
        logger.info(f"Email to {to_email} skipped: SENDGRID_API_KEY not configured")
        return False

    args = (to_email, subject, body, api_key, config['MAIL_DEFAULT_SENDER'], config['MAIL_SENDER_NAME'])
    if not config.get('MAIL_ASYNC', True):
        return send_email_sendgrid(*args)

    thread = threading.Thread(target=send_email_sendgrid, args=args)
    thread.daemon = True
    thread.start()
    return True


def send_request_status_email(request_record):
    """Tell the employee their request was reviewed"""
    employee = request_record.employee
    reviewer = request_record.reviewer
    status = request_record.status
    subject = f"Your {request_record.type_label} Has Been {status.title()}"
    body = f"""
Dear {employee.name},

Your {request_record.type_label.lower()} has been {status} by {reviewer.name if reviewer else 'HR'}.

Details:
- Type: {request_record.type.replace('_', ' ').title()}
- From: {request_record.start_date.isoformat()}
- To: {request_record.last_date.isoformat()}
- Reason: {request_record.reason}
{f'- Comment: {request_record.review_comment}' if request_record.review_comment else ''}

Status: {status.title()}

Thank you,
HR Department
"""
    return send_email(employee.email, subject, body)


def request_notifications(requests_reviewed, since=None):
    """Approval/rejection notices for the notification bell, newest first"""
    notifications = []
    for record in requests_reviewed:
        if record.status not in ('approved', 'rejected') or not record.reviewed_at:
            continue
        approved = record.status == 'approved'
        notifications.append({
            'id': f'request-{record.id}-{record.status}',
            'type': 'request_approved' if approved else 'request_rejected',
            'title': 'Request Approved' if approved else 'Request Rejected',
            'message': (f'Your {record.type_label} has been approved' if approved
                        else f'Your {record.type_label} was not approved'),
            'timestamp': record.reviewed_at.isoformat(),
            'request_id': record.id,
            'read': since is not None and record.reviewed_at <= since,
        })

    notifications.sort(key=lambda item: item['timestamp'], reverse=True)
    return notifications[:MAX_NOTIFICATIONS]

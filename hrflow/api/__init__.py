"""JSON API blueprints mounted under /api."""
from datetime import date

from flask import request

from hrflow.errors import NotFound, ValidationError, form_errors
from hrflow.forms import load_form
from hrflow.models import db


def json_body():
    return request.get_json(silent=True) or {}


def validated(form_class, payload, defaults=None, message='Invalid data'):
    form = load_form(form_class, payload, defaults)
    if not form.validate():
        raise ValidationError(message, errors=form_errors(form))
    return form


def get_or_404(model, object_id, label):
    record = db.session.get(model, object_id)
    if record is None:
        raise NotFound(f'{label} not found')
    return record


def parse_date(value, name):
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f'Invalid {name} "{value}", expected YYYY-MM-DD')


def date_arg(name, default=None):
    value = request.args.get(name)
    return parse_date(value, name) if value else default


def register_blueprints(app):
    from hrflow.api.attendance import attendance_bp
    from hrflow.api.dashboard import dashboard_bp
    from hrflow.api.employees import employees_bp
    from hrflow.api.requests import requests_bp
    from hrflow.api.schedule import schedule_bp
    from hrflow.api.zones import zones_bp
    from hrflow.auth import auth_bp

    for blueprint in (auth_bp, employees_bp, attendance_bp, zones_bp,
                      schedule_bp, requests_bp, dashboard_bp):
        app.register_blueprint(blueprint)

from datetime import datetime

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy

from hrflow.working_hours import DEFAULT_WORKING_HOURS, parse_work_days

db = SQLAlchemy()

ROLES = ('employee', 'hr')
ATTENDANCE_STATUSES = ('present', 'absent', 'late', 'on_leave')
REQUEST_TYPES = ('leave', 'overtime', 'attendance_adjustment')
REQUEST_STATUSES = ('pending', 'approved', 'rejected')


def _iso(value):
    return value.isoformat() if value else None


def _number(value):
    return float(value) if value is not None else None


# Database Models
class Employee(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='employee')  # employee or hr
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    department = db.Column(db.String(120))
    position = db.Column(db.String(120))
    base_salary = db.Column(db.Numeric(10, 2))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_hr(self):
        return self.role == 'hr'

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'name': self.name,
            'email': self.email,
            'department': self.department,
            'position': self.position,
            'base_salary': _number(self.base_salary),
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
        }


class Attendance(db.Model):
    __tablename__ = 'attendance'
    __table_args__ = (db.UniqueConstraint('user_id', 'date', name='uq_attendance_user_date'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    check_in = db.Column(db.DateTime)
    check_out = db.Column(db.DateTime)
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    location = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='present')
    hours_worked = db.Column(db.Numeric(4, 2), default=0)
    overtime_hours = db.Column(db.Numeric(4, 2), default=0)
    notes = db.Column(db.Text)

    employee = db.relationship('Employee', backref=db.backref('attendance_records', lazy=True))

    def to_dict(self, with_employee=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'date': _iso(self.date),
            'check_in': _iso(self.check_in),
            'check_out': _iso(self.check_out),
            'latitude': self.latitude,
            'longitude': self.longitude,
            'location': self.location,
            'status': self.status,
            'hours_worked': _number(self.hours_worked),
            'overtime_hours': _number(self.overtime_hours),
            'notes': self.notes,
        }
        if with_employee:
            data['user'] = self.employee.to_dict() if self.employee else None
        return data


class Request(db.Model):
    __tablename__ = 'requests'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(30), nullable=False)  # leave, overtime, attendance_adjustment
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    reviewer_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    review_comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    reviewed_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)

    employee = db.relationship('Employee', foreign_keys=[user_id], backref=db.backref('requests', lazy=True))
    reviewer = db.relationship('Employee', foreign_keys=[reviewer_id])

    @property
    def last_date(self):
        return self.end_date or self.start_date

    @property
    def type_label(self):
        return {
            'leave': 'Leave Request',
            'overtime': 'Overtime Request',
            'attendance_adjustment': 'Attendance Adjustment',
        }.get(self.type, 'Request')

    def to_dict(self, with_employee=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'reason': self.reason,
            'status': self.status,
            'reviewer_id': self.reviewer_id,
            'review_comment': self.review_comment,
            'created_at': _iso(self.created_at),
            'reviewed_at': _iso(self.reviewed_at),
            'notes': self.notes,
        }
        if with_employee:
            data['user'] = self.employee.to_dict() if self.employee else None
        return data


class Holiday(db.Model):
    __tablename__ = 'holidays'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    date = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'date': _iso(self.date), 'is_active': self.is_active}


class CheckinZone(db.Model):
    __tablename__ = 'checkin_zones'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    latitude = db.Column(db.Numeric(10, 8), nullable=False)
    longitude = db.Column(db.Numeric(11, 8), nullable=False)
    radius = db.Column(db.Integer, nullable=False)  # in meters
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'latitude': _number(self.latitude),
            'longitude': _number(self.longitude),
            'radius': self.radius,
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
        }


class WorkingHours(db.Model):
    __tablename__ = 'working_hours'
    id = db.Column(db.Integer, primary_key=True)
    start_time = db.Column(db.String(5), nullable=False, default=DEFAULT_WORKING_HOURS['start_time'])
    end_time = db.Column(db.String(5), nullable=False, default=DEFAULT_WORKING_HOURS['end_time'])
    work_days = db.Column(db.String(20), nullable=False, default='2,3,4,5,6,0')  # comma separated day numbers
    break_duration = db.Column(db.Integer, nullable=False, default=DEFAULT_WORKING_HOURS['break_duration'])
    is_active = db.Column(db.Boolean, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'work_days': parse_work_days(self.work_days),
            'break_duration': self.break_duration,
            'is_active': self.is_active,
            'created_by': self.created_by,
            'updated_at': _iso(self.updated_at),
        }


class SystemSettings(db.Model):
    __tablename__ = 'system_settings'
    id = db.Column(db.Integer, primary_key=True)
    app_name = db.Column(db.String(120), nullable=False, default='HRFlow')
    company_name = db.Column(db.String(120), default='Your Company')
    company_address = db.Column(db.Text)
    company_email = db.Column(db.String(120))
    company_phone = db.Column(db.String(40))
    timezone = db.Column(db.String(64), default='UTC')
    date_format = db.Column(db.String(20), default='MM/DD/YYYY')
    currency = db.Column(db.String(10), default='USD')
    updated_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    EDITABLE = ('app_name', 'company_name', 'company_address', 'company_email',
                'company_phone', 'timezone', 'date_format', 'currency')

    def to_dict(self):
        data = {key: getattr(self, key) for key in self.EDITABLE}
        data['updated_at'] = _iso(self.updated_at)
        return data


def default_settings(timezone='UTC'):
    return {
        'app_name': 'HRFlow',
        'company_name': 'Your Company',
        'company_address': None,
        'company_email': None,
        'company_phone': None,
        'timezone': timezone,
        'date_format': 'MM/DD/YYYY',
        'currency': 'USD',
        'updated_at': None,
    }

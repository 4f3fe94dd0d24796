from datetime import date, datetime
from decimal import Decimal

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (BooleanField, DateField, DateTimeField, DecimalField, FloatField, IntegerField,
                     PasswordField, SelectField, SelectMultipleField, StringField, TextAreaField)
from wtforms.validators import (DataRequired, Email, EqualTo, InputRequired, Length, NumberRange,
                                Optional, Regexp)

from hrflow.models import ATTENDANCE_STATUSES, ROLES
from hrflow.working_hours import DAYS_OF_WEEK

TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'
DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S.%f', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M']


def _form_value(value):
    if isinstance(value, bool):
        return 'y' if value else 'false'
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


def json_formdata(payload):
    """Turn a JSON object into form data WTForms can process"""
    formdata = MultiDict()
    for key, value in (payload or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                formdata.add(key, _form_value(item))
        else:
            formdata.add(key, _form_value(value))
    return formdata


def load_form(form_class, payload, defaults=None):
    """Build ``form_class`` from a JSON payload merged over ``defaults``"""
    merged = dict(defaults or {})
    merged.update(payload or {})
    return form_class(formdata=json_formdata(merged))


class LoginForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


class ChangePasswordForm(FlaskForm):
    current_password = PasswordField('Current Password', validators=[DataRequired()])
    new_password = PasswordField('New Password', validators=[DataRequired()])
    confirm_password = PasswordField('Confirm New Password', validators=[
        DataRequired(), EqualTo('new_password', message='Passwords must match')])


class EmployeeForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired(), Length(max=80)])
    password = PasswordField('Password', validators=[Optional()])
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    email = StringField('Email', validators=[DataRequired(), Email()])
    role = SelectField('Role', choices=[(role, role.upper() if role == 'hr' else role.title()) for role in ROLES],
                       validators=[DataRequired()])
    department = StringField('Department', validators=[Optional(), Length(max=120)])
    position = StringField('Position', validators=[Optional(), Length(max=120)])
    base_salary = DecimalField('Base Salary', places=2, validators=[Optional(), NumberRange(min=0)])
    is_active = BooleanField('Active')


class LocationForm(FlaskForm):
    latitude = FloatField('Latitude', validators=[InputRequired()])
    longitude = FloatField('Longitude', validators=[InputRequired()])
    accuracy = FloatField('Accuracy', validators=[Optional(), NumberRange(min=0)])


class CheckinZoneForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    latitude = FloatField('Latitude', validators=[InputRequired(), NumberRange(min=-90, max=90)])
    longitude = FloatField('Longitude', validators=[InputRequired(), NumberRange(min=-180, max=180)])
    radius = IntegerField('Radius (meters)', validators=[DataRequired(), NumberRange(min=1)])
    is_active = BooleanField('Active')


class WorkingHoursForm(FlaskForm):
    start_time = StringField('Start Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM')])
    end_time = StringField('End Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM')])
    work_days = SelectMultipleField('Work Days', coerce=int,
                                    choices=[(number, name) for number, name in enumerate(DAYS_OF_WEEK)],
                                    validators=[DataRequired()])
    break_duration = IntegerField('Break Duration (minutes)', validators=[InputRequired(), NumberRange(min=0)])
    is_active = BooleanField('Active')


class HolidayForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    date = DateField('Date', format='%Y-%m-%d', validators=[DataRequired()])
    is_active = BooleanField('Active')


class RequestForm(FlaskForm):
    type = SelectField('Request Type', choices=[
        ('leave', 'Leave'),
        ('overtime', 'Overtime'),
        ('attendance_adjustment', 'Attendance Adjustment'),
    ], validators=[DataRequired()])
    start_date = DateField('Start Date', format='%Y-%m-%d', validators=[DataRequired()])
    end_date = DateField('End Date', format='%Y-%m-%d', validators=[Optional()])
    reason = TextAreaField('Reason', validators=[DataRequired()])
    notes = TextAreaField('Notes', validators=[Optional()])


class ReviewRequestForm(FlaskForm):
    status = SelectField('Status', choices=[('approved', 'Approved'), ('rejected', 'Rejected')],
                         validators=[DataRequired()])
    review_comment = TextAreaField('Comment', validators=[Optional()])


class AttendanceForm(FlaskForm):
    user_id = IntegerField('Employee', validators=[DataRequired()])
    date = DateField('Date', format='%Y-%m-%d', validators=[DataRequired()])
    check_in = DateTimeField('Check In', format=DATETIME_FORMATS, validators=[Optional()])
    check_out = DateTimeField('Check Out', format=DATETIME_FORMATS, validators=[Optional()])
    location = StringField('Location', validators=[Optional(), Length(max=200)])
    status = SelectField('Status', choices=[(status, status.replace('_', ' ').title())
                                            for status in ATTENDANCE_STATUSES],
                         validators=[DataRequired()])
    hours_worked = DecimalField('Hours Worked', places=2, validators=[Optional(), NumberRange(min=0)])
    overtime_hours = DecimalField('Overtime Hours', places=2, validators=[Optional(), NumberRange(min=0)])
    notes = TextAreaField('Notes', validators=[Optional()])


class SystemSettingsForm(FlaskForm):
    app_name = StringField('Application Name', validators=[DataRequired(), Length(max=120)])
    company_name = StringField('Company Name', validators=[Optional(), Length(max=120)])
    company_address = TextAreaField('Company Address', validators=[Optional()])
    company_email = StringField('Company Email', validators=[Optional(), Email()])
    company_phone = StringField('Company Phone', validators=[Optional(), Length(max=40)])
    timezone = StringField('Timezone', validators=[DataRequired()])
    date_format = StringField('Date Format', validators=[Optional(), Length(max=20)])
    currency = StringField('Currency', validators=[Optional(), Length(max=10)])

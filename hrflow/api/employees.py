import logging

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from hrflow.api import get_or_404, json_body, validated
from hrflow.auth import hash_password, hr_required
from hrflow.errors import Conflict, PermissionDenied, ValidationError
from hrflow.forms import EmployeeForm
from hrflow.models import Employee, db

logger = logging.getLogger(__name__)

employees_bp = Blueprint('employees', __name__, url_prefix='/api/users')


def _ensure_unique(username, email, exclude_id=None):
    query = Employee.query.filter(db.or_(Employee.username == username, Employee.email == email))
    if exclude_id is not None:
        query = query.filter(Employee.id != exclude_id)
    if query.first():
        raise Conflict('Username or email already exists')


def _apply(employee, form):
    employee.username = form.username.data
    employee.name = form.name.data
    employee.email = form.email.data
    employee.role = form.role.data
    employee.department = form.department.data or None
    employee.position = form.position.data or None
    employee.base_salary = form.base_salary.data
    employee.is_active = form.is_active.data


@employees_bp.route('', methods=['GET'])
@hr_required
def list_employees():
    employees = Employee.query.order_by(Employee.name.asc()).all()
    return jsonify({'success': True, 'users': [employee.to_dict() for employee in employees]})


@employees_bp.route('', methods=['POST'])
@hr_required
def create_employee():
    form = validated(EmployeeForm, json_body(), defaults={'role': 'employee', 'is_active': True},
                     message='Invalid employee data')
    if not form.password.data:
        raise ValidationError('Password is required')
    _ensure_unique(form.username.data, form.email.data)

    employee = Employee(password=hash_password(form.password.data))
    _apply(employee, form)
    db.session.add(employee)
    db.session.commit()

    logger.info(f"{current_user.username} created employee {employee.username}")
    return jsonify({'success': True, 'user': employee.to_dict()}), 201


@employees_bp.route('/<int:user_id>', methods=['GET'])
@login_required
def get_employee(user_id):
    if not current_user.is_hr and current_user.id != user_id:
        raise PermissionDenied('You can only view your own profile')
    employee = get_or_404(Employee, user_id, 'Employee')
    return jsonify({'success': True, 'user': employee.to_dict()})


@employees_bp.route('/<int:user_id>', methods=['PUT'])
@hr_required
def update_employee(user_id):
    employee = get_or_404(Employee, user_id, 'Employee')
    form = validated(EmployeeForm, json_body(), defaults=employee.to_dict(),
                     message='Invalid employee data')
    _ensure_unique(form.username.data, form.email.data, exclude_id=employee.id)

    _apply(employee, form)
    if form.password.data:
        employee.password = hash_password(form.password.data)
    db.session.commit()

    logger.info(f"{current_user.username} updated employee {employee.username}")
    return jsonify({'success': True, 'user': employee.to_dict()})

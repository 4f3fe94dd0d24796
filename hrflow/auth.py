import logging
from functools import wraps

from flask import Blueprint, jsonify, request
from flask_login import LoginManager, current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from hrflow.errors import PermissionDenied, ValidationError, form_errors
from hrflow.forms import ChangePasswordForm, LoginForm, load_form
from hrflow.models import Employee, db

logger = logging.getLogger(__name__)

login_manager = LoginManager()

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(Employee, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': 'Authentication required'}), 401


def hr_required(view):
    """Only HR may call the wrapped view"""
    @wraps(view)
    @login_required
    def decorated(*args, **kwargs):
        if not current_user.is_hr:
            raise PermissionDenied('HR access required')
        return view(*args, **kwargs)
    return decorated


def validate_password_strength(password):
    letter_count = sum(1 for char in password if char.isalpha())
    if letter_count < 5:
        raise ValidationError('Password must contain at least 5 letters.')
    if not any(char.isdigit() for char in password):
        raise ValidationError('Password must contain at least 1 number.')


def hash_password(password):
    validate_password_strength(password)
    return generate_password_hash(password)


@auth_bp.route('/login', methods=['POST'])
def login():
    form = load_form(LoginForm, request.get_json(silent=True))
    if not form.validate():
        raise ValidationError('Username and password are required', errors=form_errors(form))

    user = Employee.query.filter_by(username=form.username.data).first()
    if not user or not check_password_hash(user.password, form.password.data):
        logger.warning(f"Failed login for {form.username.data}")
        return jsonify({'success': False, 'message': 'Invalid username or password'}), 401
    if not user.is_active:
        raise PermissionDenied('Account is deactivated')

    login_user(user)
    logger.info(f"{user.username} logged in")
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logger.info(f"{current_user.username} logged out")
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    form = load_form(ChangePasswordForm, request.get_json(silent=True))
    if not form.validate():
        raise ValidationError('Invalid password change', errors=form_errors(form))

    if not check_password_hash(current_user.password, form.current_password.data):
        raise ValidationError('Current password is incorrect.')

    current_user.password = hash_password(form.new_password.data)
    db.session.commit()
    logger.info(f"{current_user.username} changed password")
    return jsonify({'success': True, 'message': 'Password changed successfully.'})

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from warranty_tracker import db, limiter
from warranty_tracker.data.core.user import User
from warranty_tracker.logger import get_logger
from warranty_tracker.presentation.routes.payload import request_payload
from warranty_tracker.utils.logging_sanitizer import sanitize_form_data

logger = get_logger("warranty_tracker.auth")
auth = Blueprint('auth', __name__)

MIN_PASSWORD_LENGTH = 8


@auth.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    if current_user.is_authenticated:
        logger.debug(f"User {current_user.username} already authenticated")
        return jsonify({'user': current_user.to_dict()})

    data = request_payload()
    logger.debug(f"Login request: {sanitize_form_data(data)}")

    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        logger.warning(f"Login attempt with missing credentials for username: {username}")
        return jsonify({'error': 'validation_error', 'message': 'Please enter both username and password'}), 400

    user = db.session.execute(select(User).filter_by(username=username)).scalar_one_or_none()

    if user is None or not user.check_password(password):
        logger.warning(f"Failed login attempt for username: {username}")
        return jsonify({'error': 'invalid_credentials', 'message': 'Invalid username or password'}), 401

    if not user.is_active:
        logger.warning(f"Login attempt for disabled account: {username}")
        return jsonify({'error': 'account_disabled', 'message': 'Account is disabled'}), 403

    remember = str(data.get('remember', '')).lower() in ('true', '1', 'yes', 'on')
    login_user(user, remember=remember)
    logger.info(f"Successful login for user: {username}")
    return jsonify({'user': user.to_dict()})


@auth.route('/register', methods=['POST'])
@limiter.limit("5 per minute")
def register():
    data = request_payload()
    logger.debug(f"Registration request: {sanitize_form_data(data)}")

    username = (data.get('username') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not username or not email or '@' not in email:
        return jsonify({'error': 'validation_error', 'message': 'Username and a valid email are required'}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({
            'error': 'validation_error',
            'field': 'password',
            'message': f'Password must be at least {MIN_PASSWORD_LENGTH} characters',
        }), 400

    taken = db.session.execute(
        select(User.id).where(or_(User.username == username, User.email == email))
    ).first()
    if taken:
        logger.warning(f"Registration refused, username or email already in use: {username}")
        return jsonify({'error': 'conflict', 'message': 'Username or email already in use'}), 409

    user = User(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'conflict', 'message': 'Username or email already in use'}), 409

    login_user(user)
    logger.info(f"Registered user: {username}")
    return jsonify({'user': user.to_dict()}), 201


@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"User logged out: {username}")
    return jsonify({'message': 'You have been logged out'})


@auth.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})


@auth.route('/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})

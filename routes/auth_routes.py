from flask import Blueprint, current_app, g, jsonify, session

from extensions import limiter
from utils import json_body, login_required
from utils.auth import AuthService

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _service() -> AuthService:
    return AuthService(min_password_length=current_app.config.get('MIN_PASSWORD_LENGTH', 6))


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and sign it in."""
    data = json_body()
    context = _service().register(
        data.get('email'),
        data.get('password'),
        data.get('display_name'),
        role=data.get('role') or 'admin',
        school_id=data.get('school_id'),
    )
    AuthService.remember(session, context)
    return jsonify(context.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
# Throttle brute-force attempts; limit string comes from LOGIN_RATE_LIMIT
@limiter.limit(lambda: current_app.config.get('LOGIN_RATE_LIMIT', '10 per minute'))
def login():
    data = json_body()
    context = _service().sign_in(data.get('email'), data.get('password'))
    session.permanent = bool(data.get('remember'))
    AuthService.remember(session, context)
    return jsonify(context.to_dict())


@auth_bp.route('/logout', methods=['POST'])
def logout():
    AuthService.sign_out(session)
    return jsonify({'signed_out': True})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    profile = _service().get_user_data(g.auth.uid)
    return jsonify(profile or g.auth.to_dict())

"""Registration, login, logout and password reset."""

from __future__ import annotations

import logging

from flask import Blueprint, Response, g, jsonify, session

from ..services import users as user_service
from ..utils.auth import create_token, login_required
from ..utils.http import json_body

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

logger = logging.getLogger(__name__)


@auth_bp.route('/register', methods=['POST'])
def register() -> tuple[Response, int]:
    body = json_body()
    user_service.register_user(body.get('name'), body.get('email'), body.get('password'))
    return jsonify({'msg': 'Account created successfully! You can now log in.'}), 201


@auth_bp.route('/login', methods=['POST'])
def login() -> Response:
    body = json_body()
    user = user_service.login_user(body.get('email'), body.get('password'))

    session.clear()
    session.permanent = True
    session['user_id'] = user.id
    session['token_version'] = user.token_version

    return jsonify({'user': user.token_user(), 'token': create_token(user)})


@auth_bp.route('/logout', methods=['DELETE'])
@login_required
def logout() -> Response:
    user_service.logout_user(g.user)
    session.clear()
    return jsonify({'msg': 'user logged out!'})


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password() -> Response:
    token = user_service.forgot_password(json_body().get('email'))
    payload = {'msg': 'If email exists, password reset token has been generated'}
    if token:
        # no mail delivery; the client shows the token
        payload['token'] = token
    return jsonify(payload)


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password() -> Response:
    body = json_body()
    user_service.reset_password(body.get('token'), body.get('email'), body.get('password'))
    return jsonify({'msg': 'Password reset successful'})

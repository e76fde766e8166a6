"""User profiles, search and account moderation."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request

from ..services import users as user_service
from ..utils.auth import check_permissions, login_required, roles_required
from ..utils.dates import isoformat
from ..utils.http import json_body

users_bp = Blueprint('users', __name__, url_prefix='/users')


@users_bp.route('/', methods=['GET'], strict_slashes=False)
@roles_required('admin')
def list_users() -> Response:
    users = user_service.list_members()
    return jsonify({'users': [user.to_dict() for user in users], 'count': len(users)})


@users_bp.route('/search', methods=['GET'])
@login_required
def search_users() -> Response:
    users = user_service.search_users(request.args)
    return jsonify({'users': [user.to_dict() for user in users], 'count': len(users)})


@users_bp.route('/showMe', methods=['GET'])
@login_required
def show_current_user() -> Response:
    return jsonify({'user': g.user.token_user()})


@users_bp.route('/updateUser', methods=['PATCH'])
@login_required
def update_user() -> Response:
    user = user_service.update_profile(g.user, json_body())
    return jsonify({'user': user.token_user()})


@users_bp.route('/updateUserPassword', methods=['PATCH'])
@login_required
def update_user_password() -> Response:
    body = json_body()
    user_service.update_password(g.user, body.get('oldPassword'), body.get('newPassword'))
    return jsonify({'msg': 'Success! Password Updated.'})


@users_bp.route('/admin/all', methods=['GET'])
@roles_required('admin')
def admin_list_users() -> Response:
    page = user_service.admin_list_users(request.args)
    return jsonify(page.to_dict('users', lambda user: user.to_dict()))


@users_bp.route('/admin/<user_id>/ban', methods=['PATCH'])
@roles_required('admin')
def ban_user(user_id: str) -> Response:
    user = user_service.ban_user(user_id, json_body().get('reason'), actor=g.user)
    return jsonify(
        {
            'msg': 'User banned successfully',
            'user': {
                'id': user.id,
                'name': user.name,
                'email': user.email,
                'isBanned': user.is_banned,
                'bannedAt': isoformat(user.banned_at),
                'banReason': user.ban_reason,
            },
        }
    )


@users_bp.route('/admin/<user_id>/unban', methods=['PATCH'])
@roles_required('admin')
def unban_user(user_id: str) -> Response:
    user = user_service.unban_user(user_id, actor=g.user)
    return jsonify(
        {
            'msg': 'User unbanned successfully',
            'user': {'id': user.id, 'name': user.name, 'email': user.email, 'isBanned': user.is_banned},
        }
    )


@users_bp.route('/<user_id>', methods=['GET'])
@login_required
def get_user(user_id: str) -> Response:
    user = user_service.get_user(user_id)
    check_permissions(g.user, user.id)
    return jsonify({'user': user.to_dict()})

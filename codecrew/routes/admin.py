"""Admin panel endpoints. Every route requires the admin role."""

from __future__ import annotations

import logging

from flask import Blueprint, Response, g, jsonify, request

from ..errors import UnauthorizedError
from ..services import dashboard, hackathons as hackathon_service, teams as team_service
from ..services import users as user_service
from ..utils.auth import authenticate
from ..utils.http import json_body
from . import blogs as blog_routes
from . import hackathons as hackathon_routes
from . import teams as team_routes
from . import users as user_routes

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

logger = logging.getLogger(__name__)


@admin_bp.before_request
def require_admin() -> None:
    user = authenticate()
    if user.role != 'admin':
        logger.info('admin.access_denied', extra={'user_id': user.id})
        raise UnauthorizedError('Unauthorized to access this route')


@admin_bp.route('/dashboard/stats', methods=['GET'])
def dashboard_stats() -> Response:
    return jsonify(dashboard.dashboard_stats())


# Blog management
admin_bp.add_url_rule('/blogs', 'list_blogs', blog_routes.list_blogs, methods=['GET'])
admin_bp.add_url_rule('/blogs', 'create_blog', blog_routes.create_blog, methods=['POST'])
admin_bp.add_url_rule('/blogs/<blog_id>', 'update_blog', blog_routes.update_blog, methods=['PATCH'])
admin_bp.add_url_rule('/blogs/<blog_id>', 'delete_blog', blog_routes.delete_blog, methods=['DELETE'])


# Hackathon management
@admin_bp.route('/hackathons', methods=['GET'])
def list_hackathons() -> Response:
    page = hackathon_service.list_all_hackathons(request.args)
    return jsonify(page.to_dict('hackathons', lambda hackathon: hackathon.to_dict()))


admin_bp.add_url_rule('/hackathons', 'create_hackathon', hackathon_routes.create_hackathon, methods=['POST'])
admin_bp.add_url_rule(
    '/hackathons/<hackathon_id>', 'update_hackathon', hackathon_routes.update_hackathon, methods=['PATCH']
)
admin_bp.add_url_rule(
    '/hackathons/<hackathon_id>', 'delete_hackathon', hackathon_routes.delete_hackathon, methods=['DELETE']
)


# Team management
@admin_bp.route('/teams', methods=['GET'])
def list_teams() -> Response:
    page = team_service.list_all_teams(request.args)
    return jsonify(page.to_dict('teams', lambda team: team.to_dict()))


admin_bp.add_url_rule('/teams/<team_id>', 'delete_team', team_routes.delete_team, methods=['DELETE'])


# User management
admin_bp.add_url_rule('/users', 'list_users', user_routes.admin_list_users, methods=['GET'])
admin_bp.add_url_rule('/users/<user_id>/ban', 'ban_user', user_routes.ban_user, methods=['PATCH'])
admin_bp.add_url_rule('/users/<user_id>/unban', 'unban_user', user_routes.unban_user, methods=['PATCH'])


@admin_bp.route('/users/<user_id>/role', methods=['PATCH'])
def update_user_role(user_id: str) -> Response:
    user = user_service.change_role(user_id, json_body().get('role'), actor=g.user)
    return jsonify(
        {
            'msg': 'User role updated successfully',
            'user': {'id': user.id, 'name': user.name, 'email': user.email, 'role': user.role},
        }
    )

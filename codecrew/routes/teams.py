"""Team endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request

from ..services import teams as team_service
from ..utils.auth import login_required
from ..utils.http import json_body

teams_bp = Blueprint('teams', __name__, url_prefix='/teams')


@teams_bp.route('/', methods=['GET'], strict_slashes=False)
def list_teams() -> Response:
    page = team_service.list_teams(request.args)
    return jsonify(page.to_dict('teams', lambda team: team.to_dict()))


@teams_bp.route('/', methods=['POST'], strict_slashes=False)
@login_required
def create_team() -> tuple[Response, int]:
    team = team_service.create_team(g.user, json_body())
    return jsonify({'team': team.to_dict()}), 201


@teams_bp.route('/my-teams', methods=['GET'])
@login_required
def my_teams() -> Response:
    teams = team_service.my_teams(g.user)
    return jsonify({'teams': [team.to_dict() for team in teams], 'count': len(teams)})


@teams_bp.route('/<team_id>', methods=['GET'])
def get_team(team_id: str) -> Response:
    return jsonify({'team': team_service.get_team(team_id).to_dict(detail=True)})


@teams_bp.route('/<team_id>', methods=['PATCH'])
@login_required
def update_team(team_id: str) -> Response:
    team = team_service.update_team(g.user, team_id, json_body())
    return jsonify({'team': team.to_dict()})


@teams_bp.route('/<team_id>', methods=['DELETE'])
@login_required
def delete_team(team_id: str) -> Response:
    team_service.delete_team(g.user, team_id)
    return jsonify({'msg': 'Success! Team removed.'})


@teams_bp.route('/<team_id>/join', methods=['POST'])
@login_required
def join_team(team_id: str) -> Response:
    team = team_service.join_team(g.user, team_id)
    return jsonify({'team': team.to_dict()})


@teams_bp.route('/<team_id>/request', methods=['POST'])
@login_required
def request_to_join(team_id: str) -> tuple[Response, int]:
    invitation = team_service.request_to_join(g.user, team_id, json_body().get('message'))
    return jsonify({'invitation': invitation.to_dict(), 'msg': 'Join request sent successfully'}), 201


@teams_bp.route('/<team_id>/leave', methods=['POST'])
@login_required
def leave_team(team_id: str) -> Response:
    team_service.leave_team(g.user, team_id)
    return jsonify({'msg': 'Successfully left the team'})

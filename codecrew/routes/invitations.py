"""Invitation endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request

from ..services import invitations as invitation_service
from ..utils.auth import login_required
from ..utils.http import json_body

invitations_bp = Blueprint('invitations', __name__, url_prefix='/invitations')


@invitations_bp.route('/', methods=['GET'], strict_slashes=False)
@login_required
def my_invitations() -> Response:
    page = invitation_service.received_invitations(g.user, request.args)
    return jsonify(page.to_dict('invitations', lambda invitation: invitation.to_dict()))


@invitations_bp.route('/', methods=['POST'], strict_slashes=False)
@login_required
def send_invitation() -> tuple[Response, int]:
    invitation = invitation_service.send_invitation(g.user, json_body())
    return jsonify({'invitation': invitation.to_dict()}), 201


@invitations_bp.route('/sent', methods=['GET'])
@login_required
def sent_invitations() -> Response:
    page = invitation_service.sent_invitations(g.user, request.args)
    return jsonify(page.to_dict('invitations', lambda invitation: invitation.to_dict()))


@invitations_bp.route('/<invitation_id>/respond', methods=['PATCH'])
@login_required
def respond_to_invitation(invitation_id: str) -> Response:
    response = json_body().get('response')
    invitation = invitation_service.respond_to_invitation(g.user, invitation_id, response)
    return jsonify({'invitation': invitation.to_dict(), 'msg': f'Invitation {response} successfully'})


@invitations_bp.route('/<invitation_id>/cancel', methods=['PATCH'])
@login_required
def cancel_invitation(invitation_id: str) -> Response:
    invitation_service.cancel_invitation(g.user, invitation_id)
    return jsonify({'msg': 'Invitation cancelled successfully'})


@invitations_bp.route('/<invitation_id>', methods=['DELETE'])
@login_required
def delete_invitation(invitation_id: str) -> Response:
    invitation_service.delete_invitation(g.user, invitation_id)
    return jsonify({'msg': 'Invitation deleted successfully'})

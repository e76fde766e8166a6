"""Hackathon endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request

from ..services import hackathons as hackathon_service
from ..utils.auth import login_required, roles_required
from ..utils.http import json_body

hackathons_bp = Blueprint('hackathons', __name__, url_prefix='/hackathons')


@hackathons_bp.route('/', methods=['GET'], strict_slashes=False)
def list_hackathons() -> Response:
    page = hackathon_service.list_hackathons(request.args)
    return jsonify(page.to_dict('hackathons', lambda hackathon: hackathon.to_dict()))


@hackathons_bp.route('/', methods=['POST'], strict_slashes=False)
@roles_required('admin')
def create_hackathon() -> tuple[Response, int]:
    hackathon = hackathon_service.create_hackathon(g.user, json_body())
    return jsonify({'hackathon': hackathon.to_dict()}), 201


@hackathons_bp.route('/my-hackathons', methods=['GET'])
@login_required
def my_hackathons() -> Response:
    hackathons = hackathon_service.my_hackathons(g.user, request.args.get('type'))
    return jsonify({'hackathons': [h.to_dict() for h in hackathons], 'count': len(hackathons)})


@hackathons_bp.route('/<hackathon_id>', methods=['GET'])
def get_hackathon(hackathon_id: str) -> Response:
    hackathon = hackathon_service.view_hackathon(hackathon_id)
    return jsonify({'hackathon': hackathon.to_dict(detail=True)})


@hackathons_bp.route('/<hackathon_id>', methods=['PATCH'])
@roles_required('admin')
def update_hackathon(hackathon_id: str) -> Response:
    hackathon = hackathon_service.update_hackathon(g.user, hackathon_id, json_body())
    return jsonify({'hackathon': hackathon.to_dict()})


@hackathons_bp.route('/<hackathon_id>', methods=['DELETE'])
@roles_required('admin')
def delete_hackathon(hackathon_id: str) -> Response:
    hackathon_service.delete_hackathon(g.user, hackathon_id)
    return jsonify({'msg': 'Success! Hackathon removed.'})


@hackathons_bp.route('/<hackathon_id>/join', methods=['POST'])
@login_required
def join_hackathon(hackathon_id: str) -> Response:
    hackathon_service.join_hackathon(g.user, hackathon_id, json_body().get('teamId'))
    return jsonify({'msg': 'Successfully joined hackathon'})


@hackathons_bp.route('/<hackathon_id>/leave', methods=['POST'])
@login_required
def leave_hackathon(hackathon_id: str) -> Response:
    hackathon_service.leave_hackathon(g.user, hackathon_id)
    return jsonify({'msg': 'Successfully left hackathon'})


@hackathons_bp.route('/<hackathon_id>/bookmark', methods=['POST'])
@login_required
def bookmark_hackathon(hackathon_id: str) -> Response:
    bookmarked = hackathon_service.toggle_bookmark(g.user, hackathon_id)
    return jsonify(
        {
            'msg': 'Hackathon bookmarked' if bookmarked else 'Bookmark removed',
            'bookmarked': bookmarked,
        }
    )

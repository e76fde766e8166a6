"""Blog endpoints: posts, moderation, likes and comments."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request

from ..services import blogs as blog_service
from ..utils.auth import current_user, login_required, optional_auth
from ..utils.http import json_body

blogs_bp = Blueprint('blogs', __name__, url_prefix='/blogs')


@blogs_bp.route('/', methods=['GET'], strict_slashes=False)
@optional_auth
def list_blogs() -> Response:
    page = blog_service.list_blogs(current_user(), request.args)
    return jsonify(page.to_dict('blogs', lambda blog: blog.to_dict()))


@blogs_bp.route('/', methods=['POST'], strict_slashes=False)
@login_required
def create_blog() -> tuple[Response, int]:
    blog = blog_service.create_blog(g.user, json_body())
    return jsonify({'blog': blog.to_dict()}), 201


@blogs_bp.route('/my-blogs', methods=['GET'])
@login_required
def my_blogs() -> Response:
    blogs = blog_service.my_blogs(g.user)
    return jsonify({'blogs': [blog.to_dict() for blog in blogs], 'count': len(blogs)})


@blogs_bp.route('/<blog_id>', methods=['GET'])
@optional_auth
def get_blog(blog_id: str) -> Response:
    blog = blog_service.view_blog(current_user(), blog_id)
    return jsonify({'blog': blog.to_dict(detail=True)})


@blogs_bp.route('/<blog_id>', methods=['PATCH'])
@login_required
def update_blog(blog_id: str) -> Response:
    blog = blog_service.update_blog(g.user, blog_id, json_body())
    return jsonify({'blog': blog.to_dict()})


@blogs_bp.route('/<blog_id>', methods=['DELETE'])
@login_required
def delete_blog(blog_id: str) -> Response:
    blog_service.delete_blog(g.user, blog_id)
    return jsonify({'msg': 'Success! Blog removed.'})


@blogs_bp.route('/<blog_id>/like', methods=['POST'])
@login_required
def like_blog(blog_id: str) -> Response:
    liked, likes_count = blog_service.toggle_like(g.user, blog_id)
    return jsonify(
        {
            'msg': 'Blog liked' if liked else 'Like removed',
            'liked': liked,
            'likesCount': likes_count,
        }
    )


@blogs_bp.route('/<blog_id>/comments', methods=['POST'])
@login_required
def add_comment(blog_id: str) -> tuple[Response, int]:
    comment = blog_service.add_comment(g.user, blog_id, json_body().get('content'))
    return jsonify({'comment': comment.to_dict()}), 201


@blogs_bp.route('/<blog_id>/comments/<comment_id>', methods=['DELETE'])
@login_required
def delete_comment(blog_id: str, comment_id: str) -> Response:
    blog_service.delete_comment(g.user, blog_id, comment_id)
    return jsonify({'msg': 'Comment deleted successfully'})

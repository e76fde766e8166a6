"""Blog posts, moderation, likes and comments."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import String, cast, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ..errors import BadRequestError, NotFoundError, UnauthorizedError
from ..extensions import db
from ..models import Blog, BlogComment, BlogLike, Hackathon, STAFF_ROLES, User
from ..utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

AUTHOR_STATUSES = ('draft', 'pending')
FIELDS = {
    'title': 'title',
    'content': 'content',
    'excerpt': 'excerpt',
    'category': 'category',
    'tags': 'tags',
    'featuredImage': 'featured_image',
}


def _is_staff(user: Optional[User]) -> bool:
    return user is not None and user.role in STAFF_ROLES


def _blog_query(detail: bool = False):
    options = [
        selectinload(Blog.author),
        selectinload(Blog.related_hackathon),
        selectinload(Blog.likes),
        selectinload(Blog.comments),
    ]
    if detail:
        options.append(selectinload(Blog.likes).selectinload(BlogLike.user))
        options.append(selectinload(Blog.comments).selectinload(BlogComment.user))
    return select(Blog).options(*options)


def get_blog(blog_id: str, detail: bool = False) -> Blog:
    blog = db.session.scalar(_blog_query(detail).where(Blog.id == blog_id))
    if blog is None:
        raise NotFoundError(f'No blog with id : {blog_id}')
    return blog


def _related_hackathon(value: Any) -> Optional[str]:
    if not value:
        return None
    if db.session.get(Hackathon, value) is None:
        raise NotFoundError(f'No hackathon with id : {value}')
    return value


def list_blogs(viewer: Optional[User], args: Mapping[str, Any]) -> Page:
    stmt = _blog_query()
    if not _is_staff(viewer):
        stmt = stmt.where(Blog.status == 'published')
    elif args.get('status'):
        statuses = [s.strip() for s in args['status'].split(',') if s.strip()]
        stmt = stmt.where(Blog.status.in_(statuses))

    if args.get('category'):
        stmt = stmt.where(Blog.category == args['category'])
    if args.get('author'):
        stmt = stmt.where(Blog.author_id == args['author'])
    if args.get('search'):
        pattern = f"%{args['search']}%"
        stmt = stmt.where(
            or_(Blog.title.ilike(pattern), Blog.content.ilike(pattern), cast(Blog.tags, String).ilike(pattern))
        )

    stmt = stmt.order_by(Blog.published_at.desc().nulls_last(), Blog.created_at.desc())
    return paginate(stmt, args)


def my_blogs(user: User) -> list[Blog]:
    stmt = _blog_query().where(Blog.author_id == user.id).order_by(Blog.created_at.desc())
    return list(db.session.scalars(stmt).all())


def create_blog(user: User, data: Mapping[str, Any]) -> Blog:
    if not data.get('title') or not data.get('content') or not data.get('category'):
        raise BadRequestError('Please provide title, content, and category')

    blog = Blog(author_id=user.id, status='pending', tags=data.get('tags') or [])
    for key, attr in FIELDS.items():
        if key in data and key != 'tags':
            setattr(blog, attr, data[key])
    blog.related_hackathon_id = _related_hackathon(data.get('relatedHackathon'))
    blog.prepare_for_save()

    db.session.add(blog)
    db.session.commit()
    logger.info('blogs.create.success', extra={'blog_id': blog.id, 'user_id': user.id})
    return get_blog(blog.id)


def view_blog(viewer: Optional[User], blog_id: str) -> Blog:
    blog = get_blog(blog_id, detail=True)
    if blog.status != 'published' and not _is_staff(viewer) and (viewer is None or viewer.id != blog.author_id):
        raise UnauthorizedError('Not authorized to view this blog')

    db.session.execute(
        update(Blog)
        .where(Blog.id == blog.id)
        .values(views=Blog.views + 1)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return get_blog(blog_id, detail=True)


def update_blog(user: User, blog_id: str, data: Mapping[str, Any]) -> Blog:
    blog = get_blog(blog_id)
    staff = _is_staff(user)
    if not staff and blog.author_id != user.id:
        raise UnauthorizedError('Not authorized to update this blog')

    status = data.get('status')
    if status is not None and not staff and status not in AUTHOR_STATUSES:
        raise UnauthorizedError('Only moderators can publish or reject blogs')

    for key, attr in FIELDS.items():
        if key in data:
            setattr(blog, attr, data[key])
    if 'relatedHackathon' in data:
        blog.related_hackathon_id = _related_hackathon(data['relatedHackathon'])
    if status is not None:
        blog.status = status
    blog.prepare_for_save()

    db.session.commit()
    logger.info(
        'blogs.update.success',
        extra={'blog_id': blog.id, 'user_id': user.id, 'status': blog.status},
    )
    return get_blog(blog.id)


def delete_blog(user: User, blog_id: str) -> None:
    blog = get_blog(blog_id)
    if not _is_staff(user) and blog.author_id != user.id:
        raise UnauthorizedError('Not authorized to delete this blog')
    db.session.delete(blog)
    db.session.commit()
    logger.info('blogs.delete.success', extra={'blog_id': blog_id, 'user_id': user.id})


def toggle_like(user: User, blog_id: str) -> tuple[bool, int]:
    """Flip the caller's like. Returns ``(liked, likes_count)``."""

    blog = get_blog(blog_id)
    existing = blog.liked_by(user.id)
    if existing is not None:
        db.session.delete(existing)
        liked = False
    else:
        db.session.add(BlogLike(blog_id=blog.id, user_id=user.id))
        liked = True

    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise BadRequestError('Blog already liked') from exc

    count = len(get_blog(blog_id).likes)
    logger.info('blogs.like.toggled', extra={'blog_id': blog_id, 'user_id': user.id, 'liked': liked})
    return liked, count


def add_comment(user: User, blog_id: str, content: Any) -> BlogComment:
    if not content:
        raise BadRequestError('Please provide comment content')
    blog = get_blog(blog_id)
    comment = BlogComment(blog_id=blog.id, user_id=user.id, content=content)
    db.session.add(comment)
    db.session.commit()
    logger.info('blogs.comment.created', extra={'blog_id': blog_id, 'comment_id': comment.id})
    return comment


def delete_comment(user: User, blog_id: str, comment_id: str) -> None:
    blog = get_blog(blog_id)
    comment = db.session.scalar(
        select(BlogComment).where(BlogComment.id == comment_id, BlogComment.blog_id == blog.id)
    )
    if comment is None:
        raise NotFoundError(f'No comment with id : {comment_id}')
    if not _is_staff(user) and user.id not in (blog.author_id, comment.user_id):
        raise UnauthorizedError('Not authorized to delete this comment')

    db.session.delete(comment)
    db.session.commit()
    logger.info('blogs.comment.deleted', extra={'blog_id': blog_id, 'comment_id': comment_id})

"""Authentication helpers for the Code Crew API."""

from __future__ import annotations

from datetime import timedelta
from functools import wraps
import logging
from typing import Any, Dict, Optional

from flask import g, request, session
import jwt

from ..config import current_settings
from ..errors import UnauthenticatedError, UnauthorizedError
from ..extensions import db
from ..models import User
from .dates import utcnow

logger = logging.getLogger(__name__)


def create_token(user: User) -> str:
    """Issue a signed bearer token for ``user``.

    The ``ver`` claim carries the user's token version; bumping the version
    on logout revokes every token issued before.
    """

    settings = current_settings()
    now = utcnow()
    payload = {
        'sub': user.id,
        'name': user.name,
        'role': user.role,
        'email': user.email,
        'ver': user.token_version,
        'iat': int(now.timestamp()),
        'exp': int((now + timedelta(hours=settings.jwt_lifetime_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.token_secret, algorithm='HS256')


def decode_token(token: str, secret: str) -> Dict[str, Any]:
    """Validate and decode a bearer token.

    Raises
    ------
    UnauthenticatedError
        If the token is missing, malformed, expired or signed with another
        secret.
    """

    if not token:
        raise UnauthenticatedError('Authentication invalid')

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=['HS256'],
            options={'require': ['exp', 'sub']},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthenticatedError('Authentication token has expired') from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthenticatedError('Authentication invalid') from exc


def _bearer_token() -> Optional[str]:
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip() or None
    return None


def authenticate() -> User:
    """Resolve the caller from the bearer header or the session cookie."""

    token = _bearer_token()
    if token:
        payload = decode_token(token, current_settings().token_secret)
        user = db.session.get(User, payload['sub'])
        version = payload.get('ver', 0)
    elif session.get('user_id'):
        user = db.session.get(User, session['user_id'])
        version = session.get('token_version', 0)
    else:
        raise UnauthenticatedError('Authentication invalid')

    if user is None or user.token_version != version:
        raise UnauthenticatedError('Authentication invalid')
    if user.is_banned:
        logger.info('auth.banned_user_rejected', extra={'user_id': user.id})
        raise UnauthenticatedError('Account has been banned')

    g.user = user
    return user


def current_user() -> Optional[User]:
    return g.get('user')


def login_required(view):
    """Decorator rejecting anonymous callers with 401."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        authenticate()
        return view(*args, **kwargs)

    return wrapped


def optional_auth(view):
    """Decorator that attaches the caller when credentials are valid."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            authenticate()
        except UnauthenticatedError:
            g.user = None
        return view(*args, **kwargs)

    return wrapped


def roles_required(*roles: str):
    """Decorator requiring authentication and one of ``roles``."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            user = authenticate()
            if user.role not in roles:
                logger.info('auth.role_denied', extra={'user_id': user.id, 'role': user.role})
                raise UnauthorizedError('Unauthorized to access this route')
            return view(*args, **kwargs)

        return wrapped

    return decorator


def check_permissions(user: User, resource_user_id: str) -> None:
    """Only admins and the owner may access a user-scoped resource."""

    if user.role == 'admin' or user.id == resource_user_id:
        return
    raise UnauthorizedError('Not authorized to access this route')

"""Accounts: registration, credentials, profiles and moderation of users."""

from __future__ import annotations

from datetime import timedelta
import hashlib
import hmac
import logging
import secrets
from typing import Any, Mapping, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from ..config import current_settings
from ..errors import BadRequestError, NotFoundError, UnauthenticatedError
from ..extensions import db
from ..models import ROLES, User
from ..utils.dates import as_utc, utcnow
from ..utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20
PROFILE_FIELDS = {
    'bio': 'bio',
    'skills': 'skills',
    'experience': 'experience',
    'github': 'github',
    'linkedin': 'linkedin',
    'portfolio': 'portfolio',
    'personalityType': 'personality_type',
    'workStyle': 'work_style',
    'availability': 'availability',
    'location': 'location',
}


def normalize_email(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ''


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f'No user with id : {user_id}')
    return user


def find_by_email(email: Any) -> Optional[User]:
    email = normalize_email(email)
    if not email:
        return None
    return db.session.scalar(select(User).where(User.email == email))


def register_user(name: Any, email: Any, password: Any) -> User:
    if not name or not email or not password:
        raise BadRequestError('Please provide name, email and password')
    if find_by_email(email) is not None:
        raise BadRequestError('Email already exists')

    user = User(name=name, email=email, role='user')
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise BadRequestError('Email already exists') from exc
    logger.info('auth.register.success', extra={'user_id': user.id})

    if current_settings().auto_bootstrap_admin:
        bootstrap_admin()
    return user


def login_user(email: Any, password: Any) -> User:
    if not email or not password:
        raise BadRequestError('Please provide email and password')

    user = find_by_email(email)
    if user is None or not user.check_password(password):
        logger.info('auth.login.invalid_credentials')
        raise UnauthenticatedError('Invalid Credentials')
    if user.is_banned:
        logger.info('auth.login.banned', extra={'user_id': user.id})
        raise UnauthenticatedError('Account has been banned')

    logger.info('auth.login.success', extra={'user_id': user.id})
    return user


def logout_user(user: User) -> None:
    """Revoke every token issued to ``user``."""
    user.token_version = (user.token_version or 0) + 1
    db.session.commit()
    logger.info('auth.logout.success', extra={'user_id': user.id})


def forgot_password(email: Any) -> Optional[str]:
    """Issue a one-time reset token; only its hash is stored."""

    if not email:
        raise BadRequestError('Please provide valid email')

    user = find_by_email(email)
    if user is None:
        logger.info('auth.forgot_password.unknown_email')
        return None

    token = secrets.token_hex(70)
    user.password_token = _hash_token(token)
    user.password_token_expires_at = utcnow() + timedelta(minutes=current_settings().password_reset_minutes)
    db.session.commit()
    logger.info('auth.forgot_password.issued', extra={'user_id': user.id})
    return token


def reset_password(token: Any, email: Any, password: Any) -> None:
    if not token or not email or not password:
        raise BadRequestError('Please provide all values')

    user = find_by_email(email)
    if user is None or not user.password_token or not user.password_token_expires_at:
        return
    if not hmac.compare_digest(user.password_token, _hash_token(str(token))):
        logger.info('auth.reset_password.token_mismatch', extra={'user_id': user.id})
        return
    if as_utc(user.password_token_expires_at) <= utcnow():
        logger.info('auth.reset_password.token_expired', extra={'user_id': user.id})
        return

    user.set_password(password)
    user.password_token = None
    user.password_token_expires_at = None
    user.token_version = (user.token_version or 0) + 1
    db.session.commit()
    logger.info('auth.reset_password.success', extra={'user_id': user.id})


def update_profile(user: User, data: Mapping[str, Any]) -> User:
    if not data.get('name') or not data.get('email'):
        raise BadRequestError('Please provide all values')

    email = normalize_email(data['email'])
    if email != user.email:
        taken = db.session.scalar(select(User.id).where(User.email == email, User.id != user.id))
        if taken is not None:
            raise BadRequestError('Email already exists')

    user.name = data['name']
    user.email = email
    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key])

    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise BadRequestError('Email already exists') from exc
    logger.info('users.update.success', extra={'user_id': user.id})
    return user


def update_password(user: User, old_password: Any, new_password: Any) -> None:
    if not old_password or not new_password:
        raise BadRequestError('Please provide both values')
    if not user.check_password(old_password):
        raise UnauthenticatedError('Invalid Credentials')
    user.set_password(new_password)
    db.session.commit()
    logger.info('users.update_password.success', extra={'user_id': user.id})


def list_members() -> list[User]:
    stmt = select(User).where(User.role == 'user').order_by(User.created_at.desc())
    return list(db.session.scalars(stmt).all())


def search_users(args: Mapping[str, Any]) -> list[User]:
    stmt = select(User).where(User.role == 'user')

    if args.get('query'):
        pattern = f"%{args['query']}%"
        stmt = stmt.where(or_(User.name.ilike(pattern), User.bio.ilike(pattern)))
    if args.get('experience'):
        stmt = stmt.where(User.experience == args['experience'])
    if args.get('workStyle'):
        stmt = stmt.where(User.work_style == args['workStyle'])
    if args.get('availability'):
        stmt = stmt.where(User.availability == args['availability'])

    users = db.session.scalars(stmt.order_by(User.created_at.desc())).all()

    # JSON columns are not portably searchable, so skills are matched here
    wanted = {skill.strip().lower() for skill in (args.get('skills') or '').split(',') if skill.strip()}
    if wanted:
        users = [u for u in users if wanted & {skill.lower() for skill in (u.skills or [])}]
    return list(users)[:SEARCH_LIMIT]


def admin_list_users(args: Mapping[str, Any]) -> Page:
    stmt = select(User)
    if args.get('status') == 'banned':
        stmt = stmt.where(User.is_banned.is_(True))
    elif args.get('status') == 'active':
        stmt = stmt.where(User.is_banned.is_(False))
    if args.get('role'):
        stmt = stmt.where(User.role == args['role'])
    if args.get('search'):
        pattern = f"%{args['search']}%"
        stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    return paginate(stmt.order_by(User.created_at.desc()), args)


def ban_user(user_id: str, reason: Any = None, *, actor: Optional[User] = None) -> User:
    user = get_user(user_id)
    if user.role == 'admin':
        raise BadRequestError('Cannot ban admin users')
    if user.is_banned:
        raise BadRequestError('User is already banned')

    user.is_banned = True
    user.banned_at = utcnow()
    user.ban_reason = reason or 'No reason provided'
    db.session.commit()
    logger.info(
        'users.ban.success',
        extra={'user_id': user.id, 'actor_id': actor.id if actor else None},
    )
    return user


def unban_user(user_id: str, *, actor: Optional[User] = None) -> User:
    user = get_user(user_id)
    if not user.is_banned:
        raise BadRequestError('User is not banned')

    user.is_banned = False
    user.banned_at = None
    user.ban_reason = None
    db.session.commit()
    logger.info(
        'users.unban.success',
        extra={'user_id': user.id, 'actor_id': actor.id if actor else None},
    )
    return user


def change_role(user_id: str, role: Any, *, actor: Optional[User] = None) -> User:
    if role not in ROLES:
        raise BadRequestError('Invalid role provided')

    user = get_user(user_id)
    if user.role == 'admin' and role != 'admin':
        admins = db.session.scalar(select(func.count()).select_from(User).where(User.role == 'admin'))
        if admins <= 1:
            raise BadRequestError('Cannot change role of the last admin')

    user.role = role
    db.session.commit()
    logger.info(
        'users.role.updated',
        extra={'user_id': user.id, 'role': role, 'actor_id': actor.id if actor else None},
    )
    return user


def bootstrap_admin(email: Optional[str] = None) -> Optional[User]:
    """Promote a user to admin when the platform has none.

    Without ``email`` the earliest registered account is promoted. Returns
    the promoted user, or ``None`` when an admin already exists.
    """

    existing = db.session.scalar(select(User.id).where(User.role == 'admin').limit(1))
    if existing is not None:
        return None

    if email:
        candidate = find_by_email(email)
        if candidate is None:
            raise NotFoundError(f'No user with email : {email}')
    else:
        candidate = db.session.scalar(select(User).order_by(User.created_at.asc(), User.id.asc()).limit(1))
        if candidate is None:
            return None

    candidate.role = 'admin'
    db.session.commit()
    logger.info('users.bootstrap_admin.promoted', extra={'user_id': candidate.id})
    return candidate

"""Invitations, join requests and the notifications they produce."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from ..config import current_settings
from ..errors import BadRequestError, NotFoundError, UnauthorizedError
from ..extensions import db
from ..models import Hackathon, INVITATION_TYPES, Invitation, Team, User
from ..utils.dates import utcnow
from ..utils.pagination import Page, paginate
from . import teams as team_service

logger = logging.getLogger(__name__)

RESPONSES = ('accepted', 'declined')
SYSTEM_TYPES = ('team-accepted', 'team-declined')


def _invitation_query():
    return select(Invitation).options(
        selectinload(Invitation.sender),
        selectinload(Invitation.recipient),
        selectinload(Invitation.team),
        selectinload(Invitation.hackathon),
    )


def _expiry() -> Any:
    return utcnow() + timedelta(days=current_settings().invitation_ttl_days)


def get_invitation(invitation_id: str) -> Optional[Invitation]:
    return db.session.scalar(_invitation_query().where(Invitation.id == invitation_id))


def received_invitations(user: User, args: Mapping[str, Any]) -> Page:
    stmt = _invitation_query().where(
        Invitation.to_user_id == user.id,
        Invitation.status == (args.get('status') or 'pending'),
        Invitation.expires_at > utcnow(),
    )
    if args.get('type'):
        stmt = stmt.where(Invitation.type == args['type'])
    return paginate(stmt.order_by(Invitation.created_at.desc()), args)


def sent_invitations(user: User, args: Mapping[str, Any]) -> Page:
    stmt = _invitation_query().where(
        Invitation.from_user_id == user.id,
        Invitation.expires_at > utcnow(),
    )
    if args.get('type'):
        stmt = stmt.where(Invitation.type == args['type'])
    if args.get('status'):
        stmt = stmt.where(Invitation.status == args['status'])
    return paginate(stmt.order_by(Invitation.created_at.desc()), args)


def send_invitation(user: User, data: Mapping[str, Any]) -> Invitation:
    kind = data.get('type')
    to = data.get('to')
    if not kind or not to:
        raise BadRequestError('Please provide invitation type and recipient')
    if kind not in INVITATION_TYPES:
        raise BadRequestError(f'{kind!r} is not a valid invitation type')
    if kind in SYSTEM_TYPES:
        raise BadRequestError(f'{kind} invitations are created by the system')

    recipient = db.session.get(User, to)
    if recipient is None:
        raise NotFoundError('Recipient not found')
    if recipient.id == user.id:
        raise BadRequestError('You cannot invite yourself')

    team_id = data.get('team') or None
    hackathon_id = data.get('hackathon') or None

    if kind == 'team-request':
        if not team_id:
            raise BadRequestError('Team is required for team invitations')
        team = team_service.get_team(team_id)
        if team.leader_id != recipient.id:
            raise BadRequestError('Join requests must be sent to the team leader')
        return team_service.request_to_join(user, team_id, data.get('message'))

    if kind == 'team-invite':
        if not team_id:
            raise BadRequestError('Team is required for team invitations')
        team = db.session.get(Team, team_id)
        if team is None:
            raise NotFoundError('Team not found')
        if team.leader_id != user.id:
            raise UnauthorizedError('Only team leaders can send team invitations')
        if team.member_count >= team.max_members:
            raise BadRequestError('Team is full')
        if team.has_member(recipient.id):
            raise BadRequestError('User is already a team member')

    if kind == 'hackathon-invite':
        if not hackathon_id:
            raise BadRequestError('Hackathon is required for hackathon invitations')
        if db.session.get(Hackathon, hackathon_id) is None:
            raise NotFoundError(f'No hackathon with id : {hackathon_id}')

    existing = db.session.scalar(
        select(Invitation.id).where(
            Invitation.type == kind,
            Invitation.from_user_id == user.id,
            Invitation.to_user_id == recipient.id,
            Invitation.team_id.is_(None) if team_id is None else Invitation.team_id == team_id,
            Invitation.hackathon_id.is_(None) if hackathon_id is None else Invitation.hackathon_id == hackathon_id,
            Invitation.status == 'pending',
            Invitation.expires_at > utcnow(),
        )
    )
    if existing is not None:
        raise BadRequestError('Invitation already sent')

    invitation = Invitation(
        type=kind,
        from_user_id=user.id,
        to_user_id=recipient.id,
        team_id=team_id,
        hackathon_id=hackathon_id,
        message=data.get('message'),
        expires_at=_expiry(),
    )
    db.session.add(invitation)
    db.session.commit()
    logger.info(
        'invitations.send.success',
        extra={'invitation_id': invitation.id, 'type': kind, 'user_id': user.id},
    )
    return get_invitation(invitation.id)


def _notify(kind: str, responder: User, invitation: Invitation, message: str) -> None:
    db.session.add(
        Invitation(
            type=kind,
            from_user_id=responder.id,
            to_user_id=invitation.from_user_id,
            team_id=invitation.team_id,
            message=message,
            status='pending',
            expires_at=_expiry(),
        )
    )


def respond_to_invitation(user: User, invitation_id: str, response: Any) -> Invitation:
    """Accept or decline a pending invitation addressed to ``user``.

    Accepting a team invite or join request adds the invitee (or the
    requester) to the team under the capacity guard. The invitation status
    flip, the membership change and any notification commit together.
    """

    if response not in RESPONSES:
        raise BadRequestError('Please provide valid response (accepted or declined)')

    now = utcnow()
    invitation = db.session.get(Invitation, invitation_id)
    if (
        invitation is None
        or invitation.to_user_id != user.id
        or invitation.status != 'pending'
        or invitation.is_expired(now)
    ):
        raise NotFoundError('Invitation not found or already responded')

    claimed = db.session.execute(
        update(Invitation)
        .where(Invitation.id == invitation.id, Invitation.status == 'pending')
        .values(status=response, responded_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount == 0:
        raise NotFoundError('Invitation not found or already responded')

    is_team_type = invitation.type in ('team-invite', 'team-request')

    if response == 'accepted' and is_team_type:
        team = db.session.get(Team, invitation.team_id) if invitation.team_id else None
        if team is None:
            db.session.rollback()
            raise NotFoundError('Team not found')

        member_id = invitation.from_user_id if invitation.type == 'team-request' else invitation.to_user_id
        added = team_service.add_member(
            team,
            member_id,
            not_recruiting_msg='Team is no longer recruiting',
            full_msg='Team is now full',
        )
        logger.info(
            'invitations.respond.accepted',
            extra={'invitation_id': invitation.id, 'team_id': team.id, 'member_id': member_id, 'added': added},
        )
        if invitation.type == 'team-request':
            _notify('team-accepted', user, invitation, f'Your request to join "{team.name}" has been accepted!')

    if response == 'declined' and invitation.type == 'team-request':
        team = db.session.get(Team, invitation.team_id) if invitation.team_id else None
        if team is not None:
            _notify('team-declined', user, invitation, f'Your request to join "{team.name}" has been declined.')
        logger.info('invitations.respond.declined', extra={'invitation_id': invitation.id})

    db.session.commit()
    return get_invitation(invitation.id)


def cancel_invitation(user: User, invitation_id: str) -> None:
    result = db.session.execute(
        update(Invitation)
        .where(
            Invitation.id == invitation_id,
            Invitation.from_user_id == user.id,
            Invitation.status == 'pending',
            Invitation.expires_at > utcnow(),
        )
        .values(status='cancelled', updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError('Invitation not found or cannot be cancelled')
    db.session.commit()
    logger.info('invitations.cancel.success', extra={'invitation_id': invitation_id, 'user_id': user.id})


def delete_invitation(user: User, invitation_id: str) -> None:
    invitation = db.session.get(Invitation, invitation_id)
    if (
        invitation is None
        or user.id not in (invitation.from_user_id, invitation.to_user_id)
        or invitation.is_expired()
    ):
        raise NotFoundError('Invitation not found')
    db.session.delete(invitation)
    db.session.commit()
    logger.info('invitations.delete.success', extra={'invitation_id': invitation_id, 'user_id': user.id})

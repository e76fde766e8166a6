"""Team management: creation, membership and join requests.

Membership changes go through :func:`add_member` / :func:`remove_member`,
which bump the denormalised ``member_count`` with a single conditional
UPDATE so concurrent joins cannot overfill a team.
"""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any, Mapping, Optional

from sqlalchemy import String, and_, case, cast, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ..config import current_settings
from ..errors import BadRequestError, NotFoundError, UnauthorizedError
from ..extensions import db
from ..models import Hackathon, Invitation, Team, TeamMember, User
from ..utils.dates import utcnow
from ..utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    'name': 'name',
    'description': 'description',
    'maxMembers': 'max_members',
    'requiredSkills': 'required_skills',
    'projectIdea': 'project_idea',
    'tags': 'tags',
    'githubRepo': 'github_repo',
    'isPublic': 'is_public',
}


def _team_query():
    return select(Team).options(
        selectinload(Team.leader),
        selectinload(Team.members).selectinload(TeamMember.user),
        selectinload(Team.hackathon),
    )


def get_team(team_id: str) -> Team:
    team = db.session.scalar(_team_query().where(Team.id == team_id))
    if team is None:
        raise NotFoundError(f'No team with id : {team_id}')
    return team


def _is_member(team_id: str, user_id: str) -> bool:
    stmt = select(TeamMember.id).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
    return db.session.scalar(stmt) is not None


def list_teams(args: Mapping[str, Any]) -> Page:
    stmt = _team_query().where(Team.is_public.is_(True))
    if args.get('hackathon'):
        stmt = stmt.where(Team.hackathon_id == args['hackathon'])
    if args.get('status'):
        stmt = stmt.where(Team.status == args['status'])
    if args.get('search'):
        pattern = f"%{args['search']}%"
        stmt = stmt.where(
            or_(Team.name.ilike(pattern), Team.description.ilike(pattern), cast(Team.tags, String).ilike(pattern))
        )
    return paginate(stmt.order_by(Team.created_at.desc()), args)


def list_all_teams(args: Mapping[str, Any]) -> Page:
    """Every team regardless of visibility, for the admin panel."""
    return paginate(_team_query().order_by(Team.created_at.desc()), args)


def my_teams(user: User) -> list[Team]:
    member_of = select(TeamMember.team_id).where(TeamMember.user_id == user.id)
    stmt = (
        _team_query()
        .where(or_(Team.leader_id == user.id, Team.id.in_(member_of)))
        .order_by(Team.created_at.desc())
    )
    return list(db.session.scalars(stmt).all())


def create_team(user: User, data: Mapping[str, Any]) -> Team:
    if not data.get('name') or not data.get('description'):
        raise BadRequestError('Please provide team name and description')

    hackathon_id = data.get('hackathon') or None
    if hackathon_id and db.session.get(Hackathon, hackathon_id) is None:
        raise NotFoundError(f'No hackathon with id : {hackathon_id}')

    team = Team(
        name=data['name'],
        description=data['description'],
        leader_id=user.id,
        max_members=data.get('maxMembers') or 5,
        required_skills=data.get('requiredSkills') or [],
        hackathon_id=hackathon_id,
        project_idea=data.get('projectIdea'),
        github_repo=data.get('githubRepo'),
        tags=data.get('tags') or [],
        is_public=bool(data.get('isPublic', True)),
        member_count=1,
    )
    team.members.append(TeamMember(user_id=user.id, role='member'))
    team.derive_status()
    db.session.add(team)
    db.session.commit()
    logger.info('teams.create.success', extra={'team_id': team.id, 'user_id': user.id})
    return get_team(team.id)


def update_team(user: User, team_id: str, data: Mapping[str, Any]) -> Team:
    team = get_team(team_id)
    if team.leader_id != user.id:
        raise UnauthorizedError('Not authorized to update this team')

    for key, attr in UPDATABLE_FIELDS.items():
        if key in data and data[key] is not None and data[key] != '':
            setattr(team, attr, data[key])

    if team.max_members < team.member_count:
        raise BadRequestError(f'Max members cannot be lower than the current {team.member_count} members')

    team.derive_status()
    db.session.commit()
    logger.info('teams.update.success', extra={'team_id': team.id, 'user_id': user.id})
    return get_team(team.id)


def delete_team(user: User, team_id: str) -> None:
    team = get_team(team_id)
    if user.role != 'admin' and team.leader_id != user.id:
        raise UnauthorizedError('Not authorized to delete this team')
    db.session.delete(team)
    db.session.commit()
    logger.info('teams.delete.success', extra={'team_id': team_id, 'user_id': user.id})


def add_member(
    team: Team,
    user_id: str,
    *,
    not_recruiting_msg: str = 'Team is not recruiting',
    full_msg: str = 'Team is full',
) -> bool:
    """Append ``user_id`` to ``team`` without exceeding capacity.

    Returns ``False`` when the user already belongs to the team. Does not
    commit; the caller owns the transaction.
    """

    if _is_member(team.id, user_id):
        return False

    result = db.session.execute(
        update(Team)
        .where(
            Team.id == team.id,
            Team.status == 'recruiting',
            Team.member_count < Team.max_members,
        )
        .ordered_values(
            (Team.status, case((Team.member_count + 1 >= Team.max_members, 'full'), else_=Team.status)),
            (Team.member_count, Team.member_count + 1),
            (Team.updated_at, utcnow()),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.refresh(team)
        logger.info(
            'teams.add_member.rejected',
            extra={'team_id': team.id, 'status': team.status, 'member_count': team.member_count},
        )
        if team.status != 'recruiting':
            raise BadRequestError(not_recruiting_msg)
        raise BadRequestError(full_msg)

    db.session.add(TeamMember(team_id=team.id, user_id=user_id, role='member'))
    try:
        db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise BadRequestError('You are already a member of this team') from exc
    return True


def remove_member(team: Team, user_id: str) -> None:
    """Drop ``user_id`` from ``team``; a full team goes back to recruiting."""

    result = db.session.execute(
        delete(TeamMember).where(TeamMember.team_id == team.id, TeamMember.user_id == user_id)
    )
    if result.rowcount == 0:
        raise BadRequestError('You are not a member of this team')

    reopen = and_(Team.status == 'full', Team.member_count - 1 < Team.max_members)
    db.session.execute(
        update(Team)
        .where(Team.id == team.id)
        .ordered_values(
            (Team.status, case((reopen, 'recruiting'), else_=Team.status)),
            (Team.member_count, Team.member_count - 1),
            (Team.updated_at, utcnow()),
        )
        .execution_options(synchronize_session=False)
    )


def _check_joinable(team: Team, user_id: str) -> None:
    if team.member_count >= team.max_members:
        raise BadRequestError('Team is full')
    if team.status != 'recruiting':
        raise BadRequestError('Team is not recruiting')
    if team.has_member(user_id):
        raise BadRequestError('You are already a member of this team')


def join_team(user: User, team_id: str) -> Team:
    team = get_team(team_id)
    _check_joinable(team, user.id)
    if not add_member(team, user.id):
        raise BadRequestError('You are already a member of this team')
    db.session.commit()
    logger.info('teams.join.success', extra={'team_id': team_id, 'user_id': user.id})
    return get_team(team_id)


def request_to_join(user: User, team_id: str, message: Optional[str] = None) -> Invitation:
    team = get_team(team_id)
    _check_joinable(team, user.id)

    pending = db.session.scalar(
        select(Invitation.id).where(
            Invitation.type == 'team-request',
            Invitation.from_user_id == user.id,
            Invitation.to_user_id == team.leader_id,
            Invitation.team_id == team.id,
            Invitation.status == 'pending',
            Invitation.expires_at > utcnow(),
        )
    )
    if pending is not None:
        raise BadRequestError('You already have a pending request for this team')

    invitation = Invitation(
        type='team-request',
        from_user_id=user.id,
        to_user_id=team.leader_id,
        team_id=team.id,
        message=message or f'{user.name} wants to join your team "{team.name}"',
        expires_at=utcnow() + timedelta(days=current_settings().invitation_ttl_days),
    )
    db.session.add(invitation)
    db.session.commit()
    logger.info('teams.request.created', extra={'team_id': team.id, 'user_id': user.id})
    return invitation


def leave_team(user: User, team_id: str) -> None:
    team = get_team(team_id)
    if team.leader_id == user.id:
        raise BadRequestError('Team leader cannot leave the team. Transfer leadership or delete the team.')
    remove_member(team, user.id)
    db.session.commit()
    logger.info('teams.leave.success', extra={'team_id': team_id, 'user_id': user.id})

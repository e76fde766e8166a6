"""Hackathon listings, registration and bookmarks."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import String, cast, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import Hackathon, HackathonParticipant, Team, TeamMember, User, hackathon_bookmarks
from ..utils.dates import as_utc, parse_datetime, utcnow
from ..utils.pagination import Page, paginate
from .maintenance import refresh_hackathon_statuses

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'description', 'organizer', 'startDate', 'endDate', 'registrationDeadline')
DATE_FIELDS = {
    'startDate': 'start_date',
    'endDate': 'end_date',
    'registrationDeadline': 'registration_deadline',
}
FIELDS = {
    'title': 'title',
    'description': 'description',
    'organizer': 'organizer',
    'location': 'location',
    'venue': 'venue',
    'maxParticipants': 'max_participants',
    'themes': 'themes',
    'prizes': 'prizes',
    'rules': 'rules',
    'requirements': 'requirements',
    'tags': 'tags',
    'difficulty': 'difficulty',
    'website': 'website',
    'contactEmail': 'contact_email',
}


def _hackathon_query(detail: bool = False):
    options = [selectinload(Hackathon.created_by), selectinload(Hackathon.bookmarked_by)]
    if detail:
        options.append(
            selectinload(Hackathon.participants).selectinload(HackathonParticipant.user)
        )
        options.append(
            selectinload(Hackathon.participants).selectinload(HackathonParticipant.team)
        )
    return select(Hackathon).options(*options)


def get_hackathon(hackathon_id: str, detail: bool = False) -> Hackathon:
    hackathon = db.session.scalar(_hackathon_query(detail).where(Hackathon.id == hackathon_id))
    if hackathon is None:
        raise NotFoundError(f'No hackathon with id : {hackathon_id}')
    return hackathon


def _apply_fields(hackathon: Hackathon, data: Mapping[str, Any], *, partial: bool) -> None:
    for key, attr in DATE_FIELDS.items():
        if key in data:
            value = parse_datetime(data[key], key)
            if value is not None or not partial:
                setattr(hackathon, attr, value)
    for key, attr in FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if value is None and attr in ('location', 'difficulty', 'themes', 'prizes', 'requirements', 'tags'):
            continue
        setattr(hackathon, attr, value)


def list_hackathons(args: Mapping[str, Any]) -> Page:
    refresh_hackathon_statuses()

    stmt = _hackathon_query()
    if args.get('status'):
        stmt = stmt.where(Hackathon.status == args['status'])
    if args.get('difficulty') and args['difficulty'] != 'all-levels':
        stmt = stmt.where(Hackathon.difficulty == args['difficulty'])
    if args.get('location'):
        stmt = stmt.where(Hackathon.location == args['location'])
    if args.get('upcoming') == 'true':
        stmt = stmt.where(
            Hackathon.start_date >= utcnow(),
            Hackathon.status.in_(('upcoming', 'ongoing')),
        )
    if args.get('search'):
        pattern = f"%{args['search']}%"
        stmt = stmt.where(
            or_(
                Hackathon.title.ilike(pattern),
                Hackathon.description.ilike(pattern),
                Hackathon.organizer.ilike(pattern),
                cast(Hackathon.themes, String).ilike(pattern),
                cast(Hackathon.tags, String).ilike(pattern),
            )
        )
    return paginate(stmt.order_by(Hackathon.start_date.asc()), args)


def list_all_hackathons(args: Mapping[str, Any]) -> Page:
    refresh_hackathon_statuses()
    return paginate(_hackathon_query().order_by(Hackathon.created_at.desc()), args)


def create_hackathon(user: User, data: Mapping[str, Any]) -> Hackathon:
    if any(not data.get(field) for field in REQUIRED_FIELDS):
        raise BadRequestError('Please provide all required fields')

    hackathon = Hackathon(created_by_id=user.id)
    _apply_fields(hackathon, data, partial=False)
    hackathon.check_schedule()
    hackathon.sync_status()
    db.session.add(hackathon)
    db.session.commit()
    logger.info('hackathons.create.success', extra={'hackathon_id': hackathon.id, 'user_id': user.id})
    return get_hackathon(hackathon.id)


def update_hackathon(user: User, hackathon_id: str, data: Mapping[str, Any]) -> Hackathon:
    hackathon = get_hackathon(hackathon_id)
    _apply_fields(hackathon, data, partial=True)
    hackathon.check_schedule()

    if hackathon.max_participants is not None and hackathon.max_participants < hackathon.current_participants:
        raise BadRequestError('Max participants cannot be lower than the current number of participants')

    status = data.get('status')
    if status is not None:
        hackathon.status = status
        if status != 'cancelled':
            # reactivated; the schedule decides the actual state
            hackathon.status = 'upcoming'
    hackathon.sync_status()

    db.session.commit()
    logger.info(
        'hackathons.update.success',
        extra={'hackathon_id': hackathon.id, 'user_id': user.id, 'status': hackathon.status},
    )
    return get_hackathon(hackathon.id)


def delete_hackathon(user: User, hackathon_id: str) -> None:
    hackathon = get_hackathon(hackathon_id)
    db.session.delete(hackathon)
    db.session.commit()
    logger.info('hackathons.delete.success', extra={'hackathon_id': hackathon_id, 'user_id': user.id})


def _check_registration(hackathon: Hackathon, user_id: str) -> None:
    if hackathon.status != 'upcoming':
        raise BadRequestError('Cannot join this hackathon')
    if utcnow() > as_utc(hackathon.registration_deadline):
        raise BadRequestError('Registration deadline has passed')
    if hackathon.max_participants and hackathon.current_participants >= hackathon.max_participants:
        raise BadRequestError('Hackathon is full')
    if hackathon.is_participant(user_id):
        raise BadRequestError('You are already registered for this hackathon')


def join_hackathon(user: User, hackathon_id: str, team_id: Any = None) -> None:
    hackathon = get_hackathon(hackathon_id, detail=True)
    if hackathon.sync_status():
        db.session.flush()
    _check_registration(hackathon, user.id)

    if team_id:
        team = db.session.get(Team, team_id)
        if team is None:
            raise NotFoundError(f'No team with id : {team_id}')
        member = db.session.scalar(
            select(TeamMember.id).where(TeamMember.team_id == team.id, TeamMember.user_id == user.id)
        )
        if member is None:
            raise BadRequestError('You are not a member of this team')

    now = utcnow()
    result = db.session.execute(
        update(Hackathon)
        .where(
            Hackathon.id == hackathon.id,
            Hackathon.status == 'upcoming',
            Hackathon.registration_deadline >= now,
            or_(
                Hackathon.max_participants.is_(None),
                Hackathon.current_participants < Hackathon.max_participants,
            ),
        )
        .values(current_participants=Hackathon.current_participants + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.refresh(hackathon)
        _check_registration(hackathon, user.id)
        raise BadRequestError('Hackathon is full')

    db.session.add(HackathonParticipant(hackathon_id=hackathon.id, user_id=user.id, team_id=team_id or None))
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise BadRequestError('You are already registered for this hackathon') from exc
    logger.info('hackathons.join.success', extra={'hackathon_id': hackathon_id, 'user_id': user.id})


def leave_hackathon(user: User, hackathon_id: str) -> None:
    hackathon = get_hackathon(hackathon_id)
    result = db.session.execute(
        delete(HackathonParticipant).where(
            HackathonParticipant.hackathon_id == hackathon.id,
            HackathonParticipant.user_id == user.id,
        )
    )
    if result.rowcount == 0:
        raise BadRequestError('You are not registered for this hackathon')

    db.session.execute(
        update(Hackathon)
        .where(Hackathon.id == hackathon.id, Hackathon.current_participants > 0)
        .values(current_participants=Hackathon.current_participants - 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    logger.info('hackathons.leave.success', extra={'hackathon_id': hackathon_id, 'user_id': user.id})


def toggle_bookmark(user: User, hackathon_id: str) -> bool:
    """Flip the caller's bookmark; returns the new state."""

    hackathon = get_hackathon(hackathon_id)
    match = (hackathon_bookmarks.c.hackathon_id == hackathon.id) & (hackathon_bookmarks.c.user_id == user.id)
    existing = db.session.execute(select(hackathon_bookmarks.c.user_id).where(match)).first()

    if existing is not None:
        db.session.execute(hackathon_bookmarks.delete().where(match))
        bookmarked = False
    else:
        db.session.execute(hackathon_bookmarks.insert().values(hackathon_id=hackathon.id, user_id=user.id))
        bookmarked = True
    db.session.commit()
    logger.info(
        'hackathons.bookmark.toggled',
        extra={'hackathon_id': hackathon_id, 'user_id': user.id, 'bookmarked': bookmarked},
    )
    return bookmarked


def my_hackathons(user: User, kind: str | None = None) -> list[Hackathon]:
    joined = Hackathon.id.in_(
        select(HackathonParticipant.hackathon_id).where(HackathonParticipant.user_id == user.id)
    )
    bookmarked = Hackathon.id.in_(
        select(hackathon_bookmarks.c.hackathon_id).where(hackathon_bookmarks.c.user_id == user.id)
    )
    created = Hackathon.created_by_id == user.id

    conditions = {'joined': joined, 'bookmarked': bookmarked, 'created': created}
    condition = conditions.get(kind) if kind else None
    if condition is None:
        condition = or_(joined, bookmarked, created)

    refresh_hackathon_statuses()
    stmt = _hackathon_query().where(condition).order_by(Hackathon.start_date.asc())
    return list(db.session.scalars(stmt).all())


def view_hackathon(hackathon_id: str) -> Hackathon:
    refresh_hackathon_statuses()
    return get_hackathon(hackathon_id, detail=True)

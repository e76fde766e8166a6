"""Database models for Code Crew.

Embedded lists of the original document store (team members, hackathon
participants, bookmarks, blog likes and comments) are child tables with
unique constraints. Plain string lists stay JSON columns.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import uuid4

from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import BadRequestError
from .extensions import db
from .utils.dates import as_utc, isoformat, utcnow

ROLES = ("user", "moderator", "admin")
STAFF_ROLES = ("moderator", "admin")
EXPERIENCE_LEVELS = ("beginner", "intermediate", "advanced")
PERSONALITY_TYPES = ("leader", "collaborator", "innovator", "executor", "analyst")
WORK_STYLES = ("frontend", "backend", "fullstack", "design", "data", "mobile")
AVAILABILITY = ("full-time", "part-time", "weekends")

TEAM_STATUSES = ("recruiting", "full", "disbanded")
MEMBER_ROLES = ("member", "co-leader")

HACKATHON_LOCATIONS = ("online", "hybrid", "in-person")
DIFFICULTIES = ("beginner", "intermediate", "advanced", "all-levels")
HACKATHON_STATUSES = ("upcoming", "ongoing", "completed", "cancelled")

BLOG_CATEGORIES = ("tips", "success-stories", "tutorials", "announcements", "interviews")
BLOG_STATUSES = ("pending", "published", "rejected", "draft")

INVITATION_TYPES = ("team-invite", "team-request", "team-accepted", "team-declined", "hackathon-invite")
INVITATION_STATUSES = ("pending", "accepted", "declined", "cancelled")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_RE = re.compile(r"^(https?://)?[\w-]+(\.[\w-]+)+(:\d+)?(/\S*)?$", re.IGNORECASE)
WEBSITE_RE = re.compile(r"^https?://.+")
GITHUB_REPO_RE = re.compile(r"^https://github\.com/[\w\-.]+/[\w\-.]+$")
IMAGE_URL_RE = re.compile(r"^https?://.+\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)


def new_id() -> str:
    return uuid4().hex


# ---------------------------------------------------------------------------
# Field validation helpers (raise BadRequestError -> 400)
# ---------------------------------------------------------------------------


def _text(value: Any, label: str, *, min_length: int = 0, max_length: Optional[int] = None,
          required: bool = False) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip() and not required):
        if required:
            raise BadRequestError(f"Please provide {label}")
        return None if value is None else ""
    if not isinstance(value, str):
        raise BadRequestError(f"{label.capitalize()} must be a string")
    value = value.strip()
    if required and not value:
        raise BadRequestError(f"Please provide {label}")
    if len(value) < min_length:
        raise BadRequestError(f"{label.capitalize()} must be at least {min_length} characters")
    if max_length is not None and len(value) > max_length:
        raise BadRequestError(f"{label.capitalize()} cannot be more than {max_length} characters")
    return value


def _choice(value: Any, label: str, choices: Iterable[str], *, nullable: bool = False) -> Optional[str]:
    if value is None and nullable:
        return None
    if value not in choices:
        raise BadRequestError(f"{value!r} is not a valid {label}")
    return value


def _pattern(value: Any, label: str, pattern: re.Pattern, message: str) -> Optional[str]:
    if value is None or value == "":
        return value
    if not isinstance(value, str) or not pattern.match(value.strip()):
        raise BadRequestError(message)
    return value.strip()


def _string_list(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise BadRequestError(f"{label.capitalize()} must be a list of strings")
    return [item.strip() for item in value if item.strip()]


def _int_range(value: Any, label: str, low: int, high: int, *, nullable: bool = False) -> Optional[int]:
    if nullable and (value is None or value == ""):
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise BadRequestError(f"{label.capitalize()} must be a whole number") from exc
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequestError(f"{label.capitalize()} must be a whole number")
    if value < low or value > high:
        raise BadRequestError(f"{label.capitalize()} must be between {low} and {high}")
    return value


def _datetime(value: Any, label: str) -> datetime:
    if not isinstance(value, datetime):
        raise BadRequestError(f"Please provide {label}")
    return as_utc(value)


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(TimestampMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="user", index=True)

    bio = db.Column(db.String(500))
    skills = db.Column(db.JSON, nullable=False, default=list)
    experience = db.Column(db.String(20), nullable=False, default="beginner")
    github = db.Column(db.String(255))
    linkedin = db.Column(db.String(255))
    portfolio = db.Column(db.String(255))
    personality_type = db.Column(db.String(20))
    work_style = db.Column(db.String(20))
    availability = db.Column(db.String(20), nullable=False, default="part-time")
    location = db.Column(db.String(100))

    is_verified = db.Column(db.Boolean, nullable=False, default=True)
    verified_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    is_banned = db.Column(db.Boolean, nullable=False, default=False)
    banned_at = db.Column(db.DateTime(timezone=True))
    ban_reason = db.Column(db.String(500))

    password_token = db.Column(db.String(128))
    password_token_expires_at = db.Column(db.DateTime(timezone=True))
    token_version = db.Column(db.Integer, nullable=False, default=0)

    @validates("name")
    def _validate_name(self, key, value):
        return _text(value, "name", min_length=3, max_length=50, required=True)

    @validates("email")
    def _validate_email(self, key, value):
        value = _text(value, "email", required=True)
        if not EMAIL_RE.match(value):
            raise BadRequestError("Please provide valid email")
        return value.lower()

    @validates("role")
    def _validate_role(self, key, value):
        return _choice(value, "role", ROLES)

    @validates("bio")
    def _validate_bio(self, key, value):
        return _text(value, "bio", max_length=500)

    @validates("location")
    def _validate_location(self, key, value):
        return _text(value, "location", max_length=100)

    @validates("ban_reason")
    def _validate_ban_reason(self, key, value):
        return _text(value, "ban reason", max_length=500)

    @validates("skills")
    def _validate_skills(self, key, value):
        return _string_list(value, "skills")

    @validates("experience")
    def _validate_experience(self, key, value):
        return _choice(value, "experience level", EXPERIENCE_LEVELS)

    @validates("personality_type")
    def _validate_personality(self, key, value):
        return _choice(value or None, "personality type", PERSONALITY_TYPES, nullable=True)

    @validates("work_style")
    def _validate_work_style(self, key, value):
        return _choice(value or None, "work style", WORK_STYLES, nullable=True)

    @validates("availability")
    def _validate_availability(self, key, value):
        return _choice(value, "availability", AVAILABILITY)

    @validates("github", "linkedin", "portfolio")
    def _validate_profile_url(self, key, value):
        label = {"github": "GitHub", "linkedin": "LinkedIn", "portfolio": "portfolio"}[key]
        return _pattern(value, key, URL_RE, f"Please provide valid {label} URL")

    def set_password(self, password: Any) -> None:
        if not isinstance(password, str) or len(password) < 6:
            raise BadRequestError("Password must be at least 6 characters")
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not isinstance(password, str) or not password:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def token_user(self) -> dict[str, Any]:
        return {"name": self.name, "userId": self.id, "role": self.role, "email": self.email}

    def summary(self, *extra: str) -> dict[str, Any]:
        data = {"id": self.id, "name": self.name, "email": self.email}
        if "bio" in extra:
            data["bio"] = self.bio
        if "skills" in extra:
            data["skills"] = list(self.skills or [])
        return data

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "bio": self.bio,
            "skills": list(self.skills or []),
            "experience": self.experience,
            "github": self.github,
            "linkedin": self.linkedin,
            "portfolio": self.portfolio,
            "personalityType": self.personality_type,
            "workStyle": self.work_style,
            "availability": self.availability,
            "location": self.location,
            "isVerified": self.is_verified,
            "isBanned": self.is_banned,
            "bannedAt": isoformat(self.banned_at),
            "banReason": self.ban_reason,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


class TeamMember(db.Model):
    __tablename__ = "team_members"
    __table_args__ = (db.UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    team_id = db.Column(db.String(32), db.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False, default="member")
    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    team = db.relationship("Team", back_populates="members")
    user = db.relationship("User")

    @validates("role")
    def _validate_role(self, key, value):
        return _choice(value, "member role", MEMBER_ROLES)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.summary("skills") if self.user else None,
            "role": self.role,
            "joinedAt": isoformat(self.joined_at),
        }


class Team(TimestampMixin, db.Model):
    __tablename__ = "teams"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    leader_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    max_members = db.Column(db.Integer, nullable=False, default=5)
    member_count = db.Column(db.Integer, nullable=False, default=0)
    required_skills = db.Column(db.JSON, nullable=False, default=list)
    hackathon_id = db.Column(db.String(32), db.ForeignKey("hackathons.id", ondelete="SET NULL"), index=True)
    status = db.Column(db.String(20), nullable=False, default="recruiting", index=True)
    is_public = db.Column(db.Boolean, nullable=False, default=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    project_idea = db.Column(db.String(1000))
    github_repo = db.Column(db.String(255))

    leader = db.relationship("User", foreign_keys=[leader_id])
    hackathon = db.relationship("Hackathon", back_populates="teams")
    members = db.relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMember.joined_at",
    )
    invitations = db.relationship("Invitation", back_populates="team", cascade="all, delete-orphan")

    @validates("name")
    def _validate_name(self, key, value):
        return _text(value, "team name", min_length=3, max_length=50, required=True)

    @validates("description")
    def _validate_description(self, key, value):
        return _text(value, "team description", max_length=500, required=True)

    @validates("max_members")
    def _validate_max_members(self, key, value):
        return _int_range(value, "max members", 2, 10)

    @validates("status")
    def _validate_status(self, key, value):
        return _choice(value, "team status", TEAM_STATUSES)

    @validates("required_skills", "tags")
    def _validate_lists(self, key, value):
        return _string_list(value, key.replace("_", " "))

    @validates("project_idea")
    def _validate_project_idea(self, key, value):
        return _text(value, "project idea", max_length=1000)

    @validates("github_repo")
    def _validate_github_repo(self, key, value):
        return _pattern(value, key, GITHUB_REPO_RE, "Please provide valid GitHub repository URL")

    def has_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    def derive_status(self) -> str:
        """Recompute recruiting/full from the member counter."""
        if self.status != "disbanded":
            self.status = "full" if self.member_count >= self.max_members else "recruiting"
        return self.status

    def to_dict(self, detail: bool = False) -> dict[str, Any]:
        extra = ("bio", "skills") if detail else ()
        hackathon = None
        if self.hackathon is not None:
            hackathon = {
                "id": self.hackathon.id,
                "title": self.hackathon.title,
                "startDate": isoformat(self.hackathon.start_date),
                "endDate": isoformat(self.hackathon.end_date),
            }
            if detail:
                hackathon["description"] = self.hackathon.description
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "leader": self.leader.summary(*extra) if self.leader else None,
            "members": [member.to_dict() for member in self.members],
            "memberCount": self.member_count,
            "maxMembers": self.max_members,
            "requiredSkills": list(self.required_skills or []),
            "hackathon": hackathon,
            "status": self.status,
            "isPublic": self.is_public,
            "tags": list(self.tags or []),
            "projectIdea": self.project_idea,
            "githubRepo": self.github_repo,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


# ---------------------------------------------------------------------------
# Hackathons
# ---------------------------------------------------------------------------


hackathon_bookmarks = db.Table(
    "hackathon_bookmarks",
    db.Column("hackathon_id", db.String(32), db.ForeignKey("hackathons.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.String(32), db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class HackathonParticipant(db.Model):
    __tablename__ = "hackathon_participants"
    __table_args__ = (db.UniqueConstraint("hackathon_id", "user_id", name="uq_hackathon_participant"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    hackathon_id = db.Column(
        db.String(32), db.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    team_id = db.Column(db.String(32), db.ForeignKey("teams.id", ondelete="SET NULL"))
    registered_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    hackathon = db.relationship("Hackathon", back_populates="participants")
    user = db.relationship("User")
    team = db.relationship("Team")

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.summary() if self.user else None,
            "team": {"id": self.team.id, "name": self.team.name} if self.team else None,
            "registeredAt": isoformat(self.registered_at),
        }


class Hackathon(TimestampMixin, db.Model):
    __tablename__ = "hackathons"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(2000), nullable=False)
    organizer = db.Column(db.String(100), nullable=False)
    start_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=False)
    registration_deadline = db.Column(db.DateTime(timezone=True), nullable=False)
    location = db.Column(db.String(20), nullable=False, default="online")
    venue = db.Column(db.String(200))
    max_participants = db.Column(db.Integer)
    current_participants = db.Column(db.Integer, nullable=False, default=0)
    themes = db.Column(db.JSON, nullable=False, default=list)
    prizes = db.Column(db.JSON, nullable=False, default=list)
    rules = db.Column(db.String(3000))
    requirements = db.Column(db.JSON, nullable=False, default=list)
    tags = db.Column(db.JSON, nullable=False, default=list)
    difficulty = db.Column(db.String(20), nullable=False, default="all-levels")
    status = db.Column(db.String(20), nullable=False, default="upcoming", index=True)
    website = db.Column(db.String(255))
    contact_email = db.Column(db.String(255))
    created_by_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)

    created_by = db.relationship("User", foreign_keys=[created_by_id])
    participants = db.relationship(
        "HackathonParticipant",
        back_populates="hackathon",
        cascade="all, delete-orphan",
        order_by="HackathonParticipant.registered_at",
    )
    bookmarked_by = db.relationship("User", secondary=hackathon_bookmarks)
    teams = db.relationship("Team", back_populates="hackathon")
    blogs = db.relationship("Blog", back_populates="related_hackathon")
    invitations = db.relationship("Invitation", back_populates="hackathon", cascade="all, delete-orphan")

    @validates("title")
    def _validate_title(self, key, value):
        return _text(value, "hackathon title", min_length=3, max_length=100, required=True)

    @validates("description")
    def _validate_description(self, key, value):
        return _text(value, "hackathon description", max_length=2000, required=True)

    @validates("organizer")
    def _validate_organizer(self, key, value):
        return _text(value, "organizer name", max_length=100, required=True)

    @validates("start_date", "end_date", "registration_deadline")
    def _validate_dates(self, key, value):
        return _datetime(value, key.replace("_", " "))

    @validates("location")
    def _validate_location(self, key, value):
        return _choice(value, "location", HACKATHON_LOCATIONS)

    @validates("venue")
    def _validate_venue(self, key, value):
        return _text(value, "venue", max_length=200)

    @validates("max_participants")
    def _validate_max_participants(self, key, value):
        return _int_range(value, "max participants", 10, 10000, nullable=True)

    @validates("themes", "requirements", "tags")
    def _validate_lists(self, key, value):
        return _string_list(value, key)

    @validates("prizes")
    def _validate_prizes(self, key, value):
        prizes = []
        for prize in value or []:
            if not isinstance(prize, dict) or not prize.get("position") or not prize.get("amount"):
                raise BadRequestError("Each prize needs a position and an amount")
            prizes.append(
                {
                    "position": str(prize["position"]),
                    "amount": str(prize["amount"]),
                    "description": prize.get("description"),
                }
            )
        return prizes

    @validates("rules")
    def _validate_rules(self, key, value):
        return _text(value, "rules", max_length=3000)

    @validates("difficulty")
    def _validate_difficulty(self, key, value):
        return _choice(value, "difficulty", DIFFICULTIES)

    @validates("status")
    def _validate_status(self, key, value):
        return _choice(value, "hackathon status", HACKATHON_STATUSES)

    @validates("website")
    def _validate_website(self, key, value):
        return _pattern(value, key, WEBSITE_RE, "Please provide valid website URL")

    @validates("contact_email")
    def _validate_contact_email(self, key, value):
        return _pattern(value, key, EMAIL_RE, "Please provide valid email")

    def check_schedule(self) -> None:
        start = as_utc(self.start_date)
        if as_utc(self.end_date) <= start:
            raise BadRequestError("End date must be after start date")
        if as_utc(self.registration_deadline) > start:
            raise BadRequestError("Registration deadline must be before start date")

    def compute_status(self, now: Optional[datetime] = None) -> str:
        if self.status == "cancelled":
            return "cancelled"
        now = now or utcnow()
        if now < as_utc(self.start_date):
            return "upcoming"
        if now <= as_utc(self.end_date):
            return "ongoing"
        return "completed"

    def sync_status(self, now: Optional[datetime] = None) -> bool:
        status = self.compute_status(now)
        changed = status != self.status
        self.status = status
        return changed

    def is_participant(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.participants)

    def is_bookmarked_by(self, user_id: str) -> bool:
        return any(user.id == user_id for user in self.bookmarked_by)

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "description": self.description}

    def to_dict(self, detail: bool = False) -> dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "organizer": self.organizer,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "registrationDeadline": isoformat(self.registration_deadline),
            "location": self.location,
            "venue": self.venue,
            "maxParticipants": self.max_participants,
            "currentParticipants": self.current_participants,
            "themes": list(self.themes or []),
            "prizes": list(self.prizes or []),
            "rules": self.rules,
            "requirements": list(self.requirements or []),
            "tags": list(self.tags or []),
            "difficulty": self.difficulty,
            "status": self.status,
            "website": self.website,
            "contactEmail": self.contact_email,
            "bookmarkCount": len(self.bookmarked_by),
            "createdBy": self.created_by.summary() if self.created_by else None,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if detail:
            data["participants"] = [p.to_dict() for p in self.participants]
        return data


# ---------------------------------------------------------------------------
# Blogs
# ---------------------------------------------------------------------------


class BlogLike(db.Model):
    __tablename__ = "blog_likes"
    __table_args__ = (db.UniqueConstraint("blog_id", "user_id", name="uq_blog_like"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    blog_id = db.Column(db.String(32), db.ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False)
    liked_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    blog = db.relationship("Blog", back_populates="likes")
    user = db.relationship("User")


class BlogComment(db.Model):
    __tablename__ = "blog_comments"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    blog_id = db.Column(db.String(32), db.ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    blog = db.relationship("Blog", back_populates="comments")
    user = db.relationship("User")

    @validates("content")
    def _validate_content(self, key, value):
        return _text(value, "comment content", max_length=500, required=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user": self.user.summary() if self.user else None,
            "content": self.content,
            "createdAt": isoformat(self.created_at),
        }


class Blog(TimestampMixin, db.Model):
    __tablename__ = "blogs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.String(300))
    author_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    category = db.Column(db.String(30), nullable=False, index=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    featured_image = db.Column(db.String(500))
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    published_at = db.Column(db.DateTime(timezone=True), index=True)
    read_time = db.Column(db.Integer, nullable=False, default=5)
    views = db.Column(db.Integer, nullable=False, default=0)
    related_hackathon_id = db.Column(db.String(32), db.ForeignKey("hackathons.id", ondelete="SET NULL"))

    author = db.relationship("User", foreign_keys=[author_id])
    related_hackathon = db.relationship("Hackathon", back_populates="blogs")
    likes = db.relationship("BlogLike", back_populates="blog", cascade="all, delete-orphan")
    comments = db.relationship(
        "BlogComment",
        back_populates="blog",
        cascade="all, delete-orphan",
        order_by="BlogComment.created_at",
    )

    @validates("title")
    def _validate_title(self, key, value):
        return _text(value, "blog title", min_length=3, max_length=200, required=True)

    @validates("content")
    def _validate_content(self, key, value):
        return _text(value, "blog content", min_length=100, required=True)

    @validates("excerpt")
    def _validate_excerpt(self, key, value):
        return _text(value, "excerpt", max_length=300)

    @validates("category")
    def _validate_category(self, key, value):
        return _choice(value, "category", BLOG_CATEGORIES)

    @validates("tags")
    def _validate_tags(self, key, value):
        return _string_list(value, "tags")

    @validates("featured_image")
    def _validate_featured_image(self, key, value):
        return _pattern(value, key, IMAGE_URL_RE, "Please provide valid image URL")

    @validates("status")
    def _validate_status(self, key, value):
        return _choice(value, "blog status", BLOG_STATUSES)

    def prepare_for_save(self) -> None:
        """Fill the excerpt, read time and first publication timestamp."""
        if not self.excerpt and self.content:
            self.excerpt = self.content[:297] + "..."
        if self.content:
            self.read_time = max(1, math.ceil(len(self.content.split()) / 200))
        if self.status == "published" and self.published_at is None:
            self.published_at = utcnow()

    def liked_by(self, user_id: str) -> Optional[BlogLike]:
        return next((like for like in self.likes if like.user_id == user_id), None)

    def to_dict(self, detail: bool = False) -> dict[str, Any]:
        related = None
        if self.related_hackathon is not None:
            related = {"id": self.related_hackathon.id, "title": self.related_hackathon.title}
            if detail:
                related["description"] = self.related_hackathon.description
        data = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "author": self.author.summary(*(("bio",) if detail else ())) if self.author else None,
            "category": self.category,
            "tags": list(self.tags or []),
            "featuredImage": self.featured_image,
            "status": self.status,
            "publishedAt": isoformat(self.published_at),
            "readTime": self.read_time,
            "views": self.views,
            "likesCount": len(self.likes),
            "commentsCount": len(self.comments),
            "relatedHackathon": related,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if detail:
            data["likes"] = [
                {"user": like.user.summary() if like.user else None, "likedAt": isoformat(like.liked_at)}
                for like in self.likes
            ]
            data["comments"] = [comment.to_dict() for comment in self.comments]
        return data


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


class Invitation(TimestampMixin, db.Model):
    __tablename__ = "invitations"
    __table_args__ = (
        db.Index("ix_invitations_to_status", "to_user_id", "status", "created_at"),
        db.Index("ix_invitations_from_status", "from_user_id", "status", "created_at"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    type = db.Column(db.String(20), nullable=False)
    from_user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False)
    to_user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False)
    team_id = db.Column(db.String(32), db.ForeignKey("teams.id", ondelete="CASCADE"), index=True)
    hackathon_id = db.Column(db.String(32), db.ForeignKey("hackathons.id", ondelete="CASCADE"))
    message = db.Column(db.String(500))
    status = db.Column(db.String(20), nullable=False, default="pending")
    responded_at = db.Column(db.DateTime(timezone=True))
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    sender = db.relationship("User", foreign_keys=[from_user_id])
    recipient = db.relationship("User", foreign_keys=[to_user_id])
    team = db.relationship("Team", back_populates="invitations")
    hackathon = db.relationship("Hackathon", back_populates="invitations")

    @validates("type")
    def _validate_type(self, key, value):
        return _choice(value, "invitation type", INVITATION_TYPES)

    @validates("status")
    def _validate_status(self, key, value):
        return _choice(value, "invitation status", INVITATION_STATUSES)

    @validates("message")
    def _validate_message(self, key, value):
        return _text(value, "message", max_length=500)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    def to_dict(self) -> dict[str, Any]:
        team = None
        if self.team is not None:
            team = {
                "id": self.team.id,
                "name": self.team.name,
                "description": self.team.description,
                "leader": self.team.leader_id,
            }
        return {
            "id": self.id,
            "type": self.type,
            "from": self.sender.summary() if self.sender else None,
            "to": self.recipient.summary() if self.recipient else None,
            "team": team,
            "hackathon": self.hackathon.summary() if self.hackathon else None,
            "message": self.message,
            "status": self.status,
            "respondedAt": isoformat(self.responded_at),
            "expiresAt": isoformat(self.expires_at),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

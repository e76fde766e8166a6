"""Admin dashboard statistics."""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import func, select

from ..extensions import db
from ..models import Blog, Hackathon, Team, User
from ..utils.dates import as_utc, isoformat, time_ago, utcnow

RECENT_PER_KIND = 3
RECENT_TOTAL = 5


def _count(model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return db.session.scalar(stmt) or 0


def _recent(model) -> list:
    stmt = select(model).order_by(model.created_at.desc()).limit(RECENT_PER_KIND)
    return list(db.session.scalars(stmt).all())


def dashboard_stats() -> Dict[str, Any]:
    now = utcnow()
    stats = {
        'totalUsers': _count(User),
        'totalTeams': _count(Team),
        'totalHackathons': _count(Hackathon),
        'totalBlogs': _count(Blog, Blog.status == 'published'),
        'pendingBlogs': _count(Blog, Blog.status.in_(('pending', 'draft'))),
        'activeHackathons': _count(Hackathon, Hackathon.start_date <= now, Hackathon.end_date >= now),
    }

    activity: List[tuple] = []
    for user in _recent(User):
        activity.append(('user', f'New user registered: {user.name}', 'Users', user.created_at))
    for team in _recent(Team):
        activity.append(('team', f'Team "{team.name}" created', 'Users', team.created_at))
    for blog in _recent(Blog):
        activity.append(('blog', f'Blog post "{blog.title}" submitted', 'BookOpen', blog.created_at))

    activity.sort(key=lambda item: as_utc(item[3]), reverse=True)
    recent = [
        {
            'type': kind,
            'message': message,
            'time': time_ago(created_at, now),
            'icon': icon,
            'createdAt': isoformat(created_at),
        }
        for kind, message, icon, created_at in activity[:RECENT_TOTAL]
    ]
    return {'stats': stats, 'recentActivity': recent}

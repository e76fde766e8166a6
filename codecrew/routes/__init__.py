"""Blueprint registry.

Every blueprint is mounted once, under the configured API prefix, in the
order listed here.
"""

from __future__ import annotations

from .admin import admin_bp
from .auth import auth_bp
from .blogs import blogs_bp
from .hackathons import hackathons_bp
from .invitations import invitations_bp
from .teams import teams_bp
from .users import users_bp

blueprints = [
    auth_bp,
    users_bp,
    teams_bp,
    hackathons_bp,
    blogs_bp,
    invitations_bp,
    admin_bp,
]

__all__ = ["blueprints"]

"""Exception hierarchy translated into JSON responses by the app factory."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class APIError(Exception):
    """Base class for errors that carry an HTTP status code."""

    message: str
    status_code: int = 500

    def __str__(self) -> str:  # pragma: no cover - dataclass convenience
        return self.message


@dataclass(eq=False)
class BadRequestError(APIError):
    status_code: int = 400


@dataclass(eq=False)
class UnauthenticatedError(APIError):
    """Missing, invalid, expired or revoked credentials."""

    status_code: int = 401


@dataclass(eq=False)
class UnauthorizedError(APIError):
    """Authenticated, but not allowed to touch the resource."""

    status_code: int = 403


@dataclass(eq=False)
class NotFoundError(APIError):
    status_code: int = 404

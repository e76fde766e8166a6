"""Periodic housekeeping: invitation expiry and hackathon status sweeps."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from flask import Flask
from sqlalchemy import and_, case, delete, update

from ..extensions import db
from ..models import Hackathon, Invitation
from ..utils.dates import utcnow

logger = logging.getLogger(__name__)


def expire_invitations() -> int:
    """Delete invitations whose ``expires_at`` has passed."""

    result = db.session.execute(
        delete(Invitation)
        .where(Invitation.expires_at <= utcnow())
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount:
        logger.info('maintenance.invitations.expired', extra={'count': result.rowcount})
    return result.rowcount


def refresh_hackathon_statuses() -> int:
    """Re-derive upcoming/ongoing/completed from the schedule.

    Cancelled hackathons keep their status.
    """

    now = utcnow()
    derived = case(
        (Hackathon.start_date > now, 'upcoming'),
        (Hackathon.end_date >= now, 'ongoing'),
        else_='completed',
    )
    result = db.session.execute(
        update(Hackathon)
        .where(and_(Hackathon.status != 'cancelled', Hackathon.status != derived))
        .values(status=derived)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount:
        logger.info('maintenance.hackathons.refreshed', extra={'count': result.rowcount})
    return result.rowcount


def run_sweep() -> dict[str, int]:
    return {
        'expiredInvitations': expire_invitations(),
        'updatedHackathons': refresh_hackathon_statuses(),
    }


class MaintenanceWorker:
    """Daemon thread running :func:`run_sweep` every ``interval`` seconds."""

    def __init__(self, app: Flask, interval: int) -> None:
        self._app = app
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._interval <= 0:
            logger.info('maintenance.worker.disabled')
            return

        with self._lock:
            if not self.running:
                self._stop.clear()
                self._thread = threading.Thread(target=self._loop, name='codecrew-maintenance', daemon=True)
                self._thread.start()
                logger.info('maintenance.worker.started', extra={'interval': self._interval})

    def stop(self) -> None:
        self._stop.set()

    def _loop(self) -> None:  # pragma: no cover - background thread
        while not self._stop.wait(self._interval):
            try:
                with self._app.app_context():
                    run_sweep()
            except Exception:
                logger.warning('maintenance.worker.sweep_failed', exc_info=True)

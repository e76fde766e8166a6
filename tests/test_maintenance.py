from __future__ import annotations

from datetime import timedelta

from conftest import API, make_settings
from codecrew import create_app
from codecrew.extensions import db
from codecrew.models import Hackathon, Invitation
from codecrew.services.maintenance import expire_invitations, refresh_hackathon_statuses, run_sweep
from codecrew.utils.dates import utcnow


def _team_request(client, leader, requester):
    team_id = client.post(
        f"{API}/teams", json={"name": "Sweep Team", "description": "For sweeping"}, headers=leader.headers
    ).get_json()["team"]["id"]
    response = client.post(f"{API}/teams/{team_id}/request", json={}, headers=requester.headers)
    return response.get_json()["invitation"]["id"]


def test_expire_invitations_deletes_only_expired(app, client, make_user):
    leader = make_user()
    stale_requester = make_user()
    fresh_requester = make_user()
    stale = _team_request(client, leader, stale_requester)
    fresh = _team_request(client, leader, fresh_requester)

    with app.app_context():
        db.session.get(Invitation, stale).expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

        assert expire_invitations() == 1
        assert db.session.get(Invitation, stale) is None
        assert db.session.get(Invitation, fresh) is not None


def test_refresh_hackathon_statuses(app, admin, make_hackathon):
    running = make_hackathon(admin.id, start_in_days=-1, length_days=3, status="upcoming")
    finished = make_hackathon(admin.id, start_in_days=-5, length_days=1, status="ongoing")
    cancelled = make_hackathon(admin.id, start_in_days=-1, length_days=3, status="cancelled")
    future = make_hackathon(admin.id)

    with app.app_context():
        assert refresh_hackathon_statuses() == 2
        assert db.session.get(Hackathon, running).status == "ongoing"
        assert db.session.get(Hackathon, finished).status == "completed"
        assert db.session.get(Hackathon, cancelled).status == "cancelled"
        assert db.session.get(Hackathon, future).status == "upcoming"

        assert refresh_hackathon_statuses() == 0


def test_run_sweep_reports_counts(app, admin, make_hackathon):
    make_hackathon(admin.id, start_in_days=-1, length_days=3, status="upcoming")

    with app.app_context():
        assert run_sweep() == {"expiredInvitations": 0, "updatedHackathons": 1}


def test_sweep_command(app, admin, make_hackathon):
    make_hackathon(admin.id, start_in_days=-1, length_days=3, status="upcoming")

    result = app.test_cli_runner().invoke(args=["sweep"])

    assert result.exit_code == 0, result.output
    assert "0 expired invitations removed, 1 hackathon statuses updated" in result.output


def test_worker_starts_and_stops(tmp_path):
    app = create_app(make_settings(tmp_path, maintenance_interval_seconds=3600))
    worker = app.extensions["codecrew.maintenance"]

    assert worker.running
    worker.start()
    assert worker.running

    worker.stop()
    worker._thread.join(timeout=5)
    assert not worker.running

from __future__ import annotations

from datetime import timedelta

from conftest import API
from codecrew.extensions import db
from codecrew.models import Hackathon
from codecrew.utils.dates import isoformat, utcnow


def _payload(**overrides):
    start = utcnow() + timedelta(days=14)
    payload = {
        "title": "Spring Hack",
        "description": "Two days of building.",
        "organizer": "Code Crew",
        "startDate": isoformat(start),
        "endDate": isoformat(start + timedelta(days=2)),
        "registrationDeadline": isoformat(start - timedelta(days=3)),
        "location": "online",
        "maxParticipants": 50,
        "themes": ["AI", "Climate"],
        "prizes": [{"position": "1st", "amount": "$1000"}],
    }
    payload.update(overrides)
    return payload


def test_create_hackathon_is_admin_only(client, make_user, admin):
    user = make_user()

    assert client.post(f"{API}/hackathons", json=_payload(), headers=user.headers).status_code == 403

    response = client.post(f"{API}/hackathons", json=_payload(), headers=admin.headers)
    assert response.status_code == 201
    hackathon = response.get_json()["hackathon"]
    assert hackathon["status"] == "upcoming"
    assert hackathon["currentParticipants"] == 0
    assert hackathon["createdBy"]["id"] == admin.id
    assert hackathon["prizes"] == [{"position": "1st", "amount": "$1000", "description": None}]
    assert hackathon["startDate"].endswith("Z")


def test_create_hackathon_validation(client, admin):
    missing = client.post(f"{API}/hackathons", json={"title": "Only a title"}, headers=admin.headers)
    assert missing.status_code == 400
    assert missing.get_json()["msg"] == "Please provide all required fields"

    start = utcnow() + timedelta(days=5)
    backwards = _payload(startDate=isoformat(start), endDate=isoformat(start - timedelta(days=1)))
    response = client.post(f"{API}/hackathons", json=backwards, headers=admin.headers)
    assert response.status_code == 400
    assert response.get_json()["msg"] == "End date must be after start date"

    late_deadline = _payload(registrationDeadline=isoformat(start + timedelta(days=30)))
    response = client.post(f"{API}/hackathons", json=late_deadline, headers=admin.headers)
    assert response.get_json()["msg"] == "Registration deadline must be before start date"

    bad_date = client.post(f"{API}/hackathons", json=_payload(startDate="next week"), headers=admin.headers)
    assert bad_date.status_code == 400


def test_list_refreshes_status(client, admin, make_hackathon):
    make_hackathon(admin.id, start_in_days=-1, length_days=3, status="upcoming", title="Running Now")
    make_hackathon(admin.id, start_in_days=-10, length_days=2, status="upcoming", title="Long Over")
    make_hackathon(admin.id, start_in_days=20, title="Coming Up")

    body = client.get(f"{API}/hackathons").get_json()

    statuses = {item["title"]: item["status"] for item in body["hackathons"]}
    assert statuses == {"Running Now": "ongoing", "Long Over": "completed", "Coming Up": "upcoming"}

    upcoming = client.get(f"{API}/hackathons?upcoming=true").get_json()
    assert [item["title"] for item in upcoming["hackathons"]] == ["Coming Up"]

    search = client.get(f"{API}/hackathons?search=running").get_json()
    assert search["count"] == 1


def test_search_hackathons_matches_themes_and_tags(client, admin, make_hackathon):
    make_hackathon(admin.id, title="Green Build", themes=["Climate"], tags=["sustainability"])
    make_hackathon(admin.id, title="Model Sprint", themes=["AI"])

    by_theme = client.get(f"{API}/hackathons", query_string={"search": "climate"}).get_json()
    assert [item["title"] for item in by_theme["hackathons"]] == ["Green Build"]

    by_tag = client.get(f"{API}/hackathons", query_string={"search": "sustainab"}).get_json()
    assert [item["title"] for item in by_tag["hackathons"]] == ["Green Build"]


def test_join_and_leave(client, make_user, admin, make_hackathon):
    user = make_user()
    hackathon_id = make_hackathon(admin.id)

    joined = client.post(f"{API}/hackathons/{hackathon_id}/join", json={}, headers=user.headers)
    assert joined.status_code == 200
    assert joined.get_json()["msg"] == "Successfully joined hackathon"

    again = client.post(f"{API}/hackathons/{hackathon_id}/join", json={}, headers=user.headers)
    assert again.status_code == 400
    assert again.get_json()["msg"] == "You are already registered for this hackathon"

    detail = client.get(f"{API}/hackathons/{hackathon_id}").get_json()["hackathon"]
    assert detail["currentParticipants"] == 1
    assert [p["user"]["id"] for p in detail["participants"]] == [user.id]

    left = client.post(f"{API}/hackathons/{hackathon_id}/leave", headers=user.headers)
    assert left.status_code == 200
    assert client.get(f"{API}/hackathons/{hackathon_id}").get_json()["hackathon"]["currentParticipants"] == 0

    not_registered = client.post(f"{API}/hackathons/{hackathon_id}/leave", headers=user.headers)
    assert not_registered.status_code == 400


def test_join_rejections(client, make_user, admin, make_hackathon):
    user = make_user()
    ongoing = make_hackathon(admin.id, start_in_days=-1, length_days=3)
    closed = make_hackathon(admin.id, start_in_days=1, deadline_days_before=2)
    full = make_hackathon(admin.id, max_participants=10, current_participants=10)

    response = client.post(f"{API}/hackathons/{ongoing}/join", json={}, headers=user.headers)
    assert response.get_json()["msg"] == "Cannot join this hackathon"

    response = client.post(f"{API}/hackathons/{closed}/join", json={}, headers=user.headers)
    assert response.get_json()["msg"] == "Registration deadline has passed"

    response = client.post(f"{API}/hackathons/{full}/join", json={}, headers=user.headers)
    assert response.status_code == 400
    assert response.get_json()["msg"] == "Hackathon is full"

    missing = client.post(f"{API}/hackathons/missing/join", json={}, headers=user.headers)
    assert missing.status_code == 404


def test_join_with_team_requires_membership(client, make_user, admin, make_hackathon):
    leader = make_user()
    outsider = make_user()
    hackathon_id = make_hackathon(admin.id)
    team = client.post(
        f"{API}/teams",
        json={"name": "Hack Team", "description": "Team for the event", "hackathon": hackathon_id},
        headers=leader.headers,
    ).get_json()["team"]

    rejected = client.post(
        f"{API}/hackathons/{hackathon_id}/join", json={"teamId": team["id"]}, headers=outsider.headers
    )
    assert rejected.status_code == 400
    assert rejected.get_json()["msg"] == "You are not a member of this team"

    accepted = client.post(
        f"{API}/hackathons/{hackathon_id}/join", json={"teamId": team["id"]}, headers=leader.headers
    )
    assert accepted.status_code == 200
    participants = client.get(f"{API}/hackathons/{hackathon_id}").get_json()["hackathon"]["participants"]
    assert participants[0]["team"] == {"id": team["id"], "name": "Hack Team"}


def test_bookmark_toggle_and_my_hackathons(client, make_user, admin, make_hackathon):
    user = make_user()
    bookmarked = make_hackathon(admin.id, title="Saved For Later")
    joined = make_hackathon(admin.id, title="Signed Up")
    make_hackathon(admin.id, title="Ignored")

    first = client.post(f"{API}/hackathons/{bookmarked}/bookmark", headers=user.headers).get_json()
    assert first == {"msg": "Hackathon bookmarked", "bookmarked": True}
    client.post(f"{API}/hackathons/{joined}/join", json={}, headers=user.headers)

    mine = client.get(f"{API}/hackathons/my-hackathons", headers=user.headers).get_json()
    assert {item["title"] for item in mine["hackathons"]} == {"Saved For Later", "Signed Up"}

    only_saved = client.get(f"{API}/hackathons/my-hackathons?type=bookmarked", headers=user.headers).get_json()
    assert [item["title"] for item in only_saved["hackathons"]] == ["Saved For Later"]
    assert only_saved["hackathons"][0]["bookmarkCount"] == 1

    second = client.post(f"{API}/hackathons/{bookmarked}/bookmark", headers=user.headers).get_json()
    assert second["bookmarked"] is False

    created = client.get(f"{API}/hackathons/my-hackathons?type=created", headers=admin.headers).get_json()
    assert created["count"] == 3


def test_cancelled_status_is_sticky(client, app, admin, make_hackathon):
    hackathon_id = make_hackathon(admin.id, start_in_days=-1, length_days=3)

    cancelled = client.patch(f"{API}/hackathons/{hackathon_id}", json={"status": "cancelled"}, headers=admin.headers)
    assert cancelled.status_code == 200
    assert cancelled.get_json()["hackathon"]["status"] == "cancelled"

    listed = client.get(f"{API}/hackathons").get_json()["hackathons"]
    assert listed[0]["status"] == "cancelled"

    reopened = client.patch(f"{API}/hackathons/{hackathon_id}", json={"status": "upcoming"}, headers=admin.headers)
    assert reopened.get_json()["hackathon"]["status"] == "ongoing"


def test_update_max_participants_floor(client, make_user, admin, make_hackathon):
    hackathon_id = make_hackathon(admin.id, max_participants=20, current_participants=15)

    response = client.patch(f"{API}/hackathons/{hackathon_id}", json={"maxParticipants": 12}, headers=admin.headers)

    assert response.status_code == 400


def test_delete_hackathon(client, app, admin, make_hackathon):
    hackathon_id = make_hackathon(admin.id)

    response = client.delete(f"{API}/hackathons/{hackathon_id}", headers=admin.headers)

    assert response.status_code == 200
    assert response.get_json()["msg"] == "Success! Hackathon removed."
    with app.app_context():
        assert db.session.get(Hackathon, hackathon_id) is None

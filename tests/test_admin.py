from __future__ import annotations

from conftest import API

ADMIN = f"{API}/admin"


def test_admin_routes_require_admin(client, make_user):
    user = make_user()
    moderator = make_user(role="moderator")

    assert client.get(f"{ADMIN}/dashboard/stats").status_code == 401

    response = client.get(f"{ADMIN}/dashboard/stats", headers=user.headers)
    assert response.status_code == 403
    assert response.get_json()["msg"] == "Unauthorized to access this route"

    assert client.get(f"{ADMIN}/users", headers=moderator.headers).status_code == 403


def test_dashboard_stats(client, make_user, admin, make_hackathon):
    member = make_user(name="Recent Member")
    make_hackathon(admin.id, start_in_days=-1, length_days=3)
    make_hackathon(admin.id, start_in_days=30)
    client.post(f"{API}/teams", json={"name": "Stat Team", "description": "Counted"}, headers=member.headers)

    body = client.get(f"{ADMIN}/dashboard/stats", headers=admin.headers).get_json()

    assert body["stats"] == {
        "totalUsers": 2,
        "totalTeams": 1,
        "totalHackathons": 2,
        "totalBlogs": 0,
        "pendingBlogs": 0,
        "activeHackathons": 1,
    }
    activity = body["recentActivity"]
    assert activity[0]["message"] == 'Team "Stat Team" created'
    assert activity[0]["time"] == "Just now"
    assert {item["type"] for item in activity} == {"user", "team"}


def test_ban_blocks_existing_token(client, make_user, admin):
    user = make_user()

    banned = client.patch(f"{ADMIN}/users/{user.id}/ban", json={"reason": "Spam"}, headers=admin.headers)
    assert banned.status_code == 200
    body = banned.get_json()
    assert body["msg"] == "User banned successfully"
    assert body["user"]["isBanned"] is True
    assert body["user"]["banReason"] == "Spam"

    blocked = client.get(f"{API}/users/showMe", headers=user.headers)
    assert blocked.status_code == 401
    assert blocked.get_json()["msg"] == "Account has been banned"

    twice = client.patch(f"{ADMIN}/users/{user.id}/ban", json={}, headers=admin.headers)
    assert twice.status_code == 400

    unbanned = client.patch(f"{ADMIN}/users/{user.id}/unban", headers=admin.headers)
    assert unbanned.status_code == 200
    assert unbanned.get_json()["user"]["isBanned"] is False
    assert client.get(f"{API}/users/showMe", headers=user.headers).status_code == 200

    not_banned = client.patch(f"{ADMIN}/users/{user.id}/unban", headers=admin.headers)
    assert not_banned.status_code == 400


def test_cannot_ban_admin(client, make_user, admin):
    other_admin = make_user(role="admin")

    response = client.patch(f"{ADMIN}/users/{other_admin.id}/ban", json={}, headers=admin.headers)

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Cannot ban admin users"


def test_default_ban_reason(client, make_user, admin):
    user = make_user()

    response = client.patch(f"{ADMIN}/users/{user.id}/ban", json={}, headers=admin.headers)

    assert response.get_json()["user"]["banReason"] == "No reason provided"


def test_admin_user_listing_filters(client, make_user, admin):
    make_user(name="Banned Person")
    active = make_user(name="Active Person")
    banned_id = client.get(f"{ADMIN}/users?search=Banned", headers=admin.headers).get_json()["users"][0]["id"]
    client.patch(f"{ADMIN}/users/{banned_id}/ban", json={}, headers=admin.headers)

    banned = client.get(f"{ADMIN}/users?status=banned", headers=admin.headers).get_json()
    assert [u["name"] for u in banned["users"]] == ["Banned Person"]

    admins = client.get(f"{ADMIN}/users?role=admin", headers=admin.headers).get_json()
    assert [u["id"] for u in admins["users"]] == [admin.id]

    paged = client.get(f"{ADMIN}/users?limit=1&page=2", headers=admin.headers).get_json()
    assert paged["count"] == 1
    assert paged["pagination"] == {"current": 2, "pages": 3, "total": 3}
    assert active.id in {
        u["id"] for u in client.get(f"{ADMIN}/users?status=active", headers=admin.headers).get_json()["users"]
    }


def test_change_role(client, make_user, admin):
    user = make_user()

    invalid = client.patch(f"{ADMIN}/users/{user.id}/role", json={"role": "superuser"}, headers=admin.headers)
    assert invalid.status_code == 400
    assert invalid.get_json()["msg"] == "Invalid role provided"

    promoted = client.patch(f"{ADMIN}/users/{user.id}/role", json={"role": "moderator"}, headers=admin.headers)
    assert promoted.status_code == 200
    assert promoted.get_json()["user"]["role"] == "moderator"


def test_last_admin_keeps_role(client, make_user, admin):
    response = client.patch(f"{ADMIN}/users/{admin.id}/role", json={"role": "user"}, headers=admin.headers)

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Cannot change role of the last admin"

    second = make_user(role="admin")
    demoted = client.patch(f"{ADMIN}/users/{admin.id}/role", json={"role": "user"}, headers=second.headers)
    assert demoted.status_code == 200


def test_admin_lists_private_teams(client, make_user, admin):
    leader = make_user()
    client.post(
        f"{API}/teams", json={"name": "Hidden Team", "description": "Private", "isPublic": False}, headers=leader.headers
    )

    assert client.get(f"{API}/teams").get_json()["count"] == 0
    body = client.get(f"{ADMIN}/teams", headers=admin.headers).get_json()
    assert [team["name"] for team in body["teams"]] == ["Hidden Team"]


def test_admin_hackathon_and_blog_management(client, make_user, admin, make_hackathon):
    author = make_user()
    make_hackathon(admin.id, start_in_days=-10, length_days=2, status="upcoming")
    content = "Practical advice for first time hackers. " * 5
    blog = client.post(
        f"{API}/blogs", json={"title": "Tips", "content": content, "category": "tips"}, headers=author.headers
    ).get_json()["blog"]

    hackathons = client.get(f"{ADMIN}/hackathons", headers=admin.headers).get_json()
    assert hackathons["hackathons"][0]["status"] == "completed"

    pending = client.get(f"{ADMIN}/blogs?status=pending", headers=admin.headers).get_json()
    assert [item["id"] for item in pending["blogs"]] == [blog["id"]]

    published = client.patch(f"{ADMIN}/blogs/{blog['id']}", json={"status": "published"}, headers=admin.headers)
    assert published.get_json()["blog"]["status"] == "published"

    assert client.delete(f"{ADMIN}/blogs/{blog['id']}", headers=admin.headers).status_code == 200

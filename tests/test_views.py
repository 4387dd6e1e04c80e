"""HTML views: landing, pool admin, participant play page."""

from santapool.extensions import db
from santapool.models import Group, Participant, Pool
from santapool.services.pools import draw_pool


def _pool(client):
    resp = client.post("/pools", data={"name": "Family"})
    assert resp.status_code == 302
    return Pool.query.one()


def test_landing_lists_pools_created_in_this_session(client):
    assert b"New pool" in client.get("/").data
    pool = _pool(client)
    page = client.get("/").data
    assert pool.name.encode() in page


def test_create_pool_requires_name(client):
    resp = client.post("/pools", data={"name": " "}, follow_redirects=True)
    assert b"Name is required." in resp.data
    assert Pool.query.count() == 0


def test_admin_page_unknown_pool(client):
    assert client.get("/pool/does-not-exist").status_code == 404


def test_build_roster_and_draw(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    client.post(f"/pool/{pool.id}/groups")
    first, second = Group.query.order_by(Group.id).all()
    client.post(f"/pool/{pool.id}/groups/{first.id}/participants", data={"name": "Alice"})
    client.post(f"/pool/{pool.id}/groups/{second.id}/participants", data={"name": "Bob"})

    resp = client.post(f"/pool/{pool.id}/draw", follow_redirects=True)
    assert b"The draw is done" in resp.data
    assert b"Alice &rarr; Bob" in resp.data
    assert b"Bob &rarr; Alice" in resp.data


def test_draw_failure_is_flashed(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    group = Group.query.one()
    client.post(f"/pool/{pool.id}/groups/{group.id}/participants", data={"name": "Alice"})

    resp = client.post(f"/pool/{pool.id}/draw", follow_redirects=True)
    assert b"Failed to draw: Need at least 2 participants" in resp.data


def test_roster_changes_blocked_after_draw(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    group = Group.query.one()
    for name in ("Alice", "Bob"):
        client.post(f"/pool/{pool.id}/groups/{group.id}/participants", data={"name": name})
    draw_pool(pool.id)

    resp = client.post(f"/pool/{pool.id}/groups/{group.id}/participants", data={"name": "Carol"}, follow_redirects=True)
    assert b"can no longer change" in resp.data
    assert Participant.query.count() == 2


def test_rename_still_allowed_after_draw(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    group = Group.query.one()
    for name in ("Alice", "Bob"):
        client.post(f"/pool/{pool.id}/groups/{group.id}/participants", data={"name": name})
    draw_pool(pool.id)

    client.post(f"/pool/{pool.id}/rename", data={"name": "Friends"})
    db.session.expire_all()
    assert db.session.get(Pool, pool.id).name == "Friends"


def test_move_participant(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    client.post(f"/pool/{pool.id}/groups")
    first, second = Group.query.order_by(Group.id).all()
    client.post(f"/pool/{pool.id}/groups/{first.id}/participants", data={"name": "Alice"})
    alice = Participant.query.one()

    client.post(f"/pool/{pool.id}/participants/{alice.id}/move", data={"group_id": str(second.id)})
    db.session.expire_all()
    assert db.session.get(Participant, alice.id).group_id == second.id


def test_participant_of_other_pool_is_404(client):
    pool = _pool(client)
    client.post("/pools", data={"name": "Other"})
    other = Pool.query.filter_by(name="Other").one()
    client.post(f"/pool/{other.id}/groups")
    group = Group.query.one()
    client.post(f"/pool/{other.id}/groups/{group.id}/participants", data={"name": "Alice"})
    alice = Participant.query.one()

    assert client.post(f"/pool/{pool.id}/participants/{alice.id}/delete").status_code == 404


def test_delete_participant_group_and_pool(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    group = Group.query.one()
    client.post(f"/pool/{pool.id}/groups/{group.id}/participants", data={"name": "Alice"})
    alice = Participant.query.one()

    client.post(f"/pool/{pool.id}/participants/{alice.id}/delete")
    assert Participant.query.count() == 0
    client.post(f"/pool/{pool.id}/groups/{group.id}/delete")
    assert Group.query.count() == 0

    resp = client.post(f"/pool/{pool.id}/delete")
    assert resp.status_code == 302
    assert Pool.query.count() == 0
    assert b"Family" not in client.get("/").data


def test_play_page(client):
    pool = _pool(client)
    client.post(f"/pool/{pool.id}/groups")
    client.post(f"/pool/{pool.id}/groups")
    first, second = Group.query.order_by(Group.id).all()
    client.post(f"/pool/{pool.id}/groups/{first.id}/participants", data={"name": "Alice"})
    client.post(f"/pool/{pool.id}/groups/{second.id}/participants", data={"name": "Bob"})
    alice = Participant.query.filter_by(name="Alice").one()

    assert b"has not happened yet" in client.get(f"/play/{alice.id}").data
    draw_pool(pool.id)
    page = client.get(f"/play/{alice.id}").data
    assert b"Welcome, Alice!" in page
    assert b"<strong>Bob</strong>" in page


def test_play_page_unknown_participant(client):
    assert client.get("/play/nobody").status_code == 404

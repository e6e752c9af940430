from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.models import VideoVisibility

MP4 = b"\x00\x00\x00\x18ftypmp42" + bytes(range(256)) * 4


def _upload(client, headers, title="Beach Day", visibility="PUBLIC", **extra):
    return client.post(
        "/api/videos",
        headers=headers,
        files={"file": ("beach.mp4", MP4, "video/mp4")},
        data={"title": title, "visibility": visibility, **extra},
    )


def test_beach_day_scenario(client, alice, carol, auth_headers):
    resp = _upload(client, auth_headers(alice), description="sand", thumbnail_url="https://img/beach.jpg")
    assert resp.status_code == 201
    video = resp.json()
    assert video["owner_id"] == alice.id
    assert video["visibility"] == "PUBLIC"
    assert video["views"] == 0 and video["likes_count"] == 0
    assert video["thumbnail_url"] == "https://img/beach.jpg"
    assert video["video_url"] == f"/media/videos/{video['asset_path']}"

    # Anonymous viewer finds it
    listed = client.get("/api/videos", params={"scope": "explore", "q": "beach"})
    assert listed.status_code == 200
    assert [v["id"] for v in listed.json()] == [video["id"]]

    # Anonymous like is refused
    resp = client.post(f"/api/videos/{video['id']}/like")
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "authentication_required"

    # Signed-in user toggles on, then off
    resp = client.post(f"/api/videos/{video['id']}/like", headers=auth_headers(carol))
    assert resp.json() == {"liked": True, "likes_count": 1}
    detail = client.get(f"/api/videos/{video['id']}", headers=auth_headers(carol)).json()
    assert detail["liked"] is True
    resp = client.post(f"/api/videos/{video['id']}/like", headers=auth_headers(carol))
    assert resp.json() == {"liked": False, "likes_count": 0}


def test_upload_requires_sign_in(client):
    resp = _upload(client, {})
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "authentication_required"


def test_upload_rejects_non_video(client, alice, auth_headers):
    resp = client.post(
        "/api/videos",
        headers=auth_headers(alice),
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"title": "notes"},
    )
    assert resp.status_code == 415
    assert resp.json()["error_code"] == "invalid_media_kind"


def test_private_upload_visible_to_owner_only(client, alice, bob, auth_headers):
    video = _upload(client, auth_headers(alice), title="Secret", visibility="PRIVATE").json()

    personal = client.get("/api/videos", params={"scope": "personal"}, headers=auth_headers(alice)).json()
    assert [v["id"] for v in personal] == [video["id"]]
    assert client.get("/api/videos").json() == []
    assert client.get(f"/api/videos/{video['id']}", headers=auth_headers(bob)).status_code == 404
    assert client.get(f"/api/videos/{video['id']}", headers=auth_headers(alice)).status_code == 200


def test_personal_scope_needs_identity(client):
    resp = client.get("/api/videos", params={"scope": "personal"})
    assert resp.status_code == 401


def test_profile_scope(client, alice, bob, auth_headers):
    _upload(client, auth_headers(alice), title="Public one")
    _upload(client, auth_headers(alice), title="Private one", visibility="PRIVATE")
    _upload(client, auth_headers(bob), title="Bob's")

    resp = client.get("/api/videos", params={"scope": "profile", "owner_id": alice.id})
    assert [v["title"] for v in resp.json()] == ["Public one"]
    resp = client.get("/api/videos", params={"scope": "profile"})
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "invalid_request"


def test_sort_by_views(client, alice, auth_headers):
    first = _upload(client, auth_headers(alice), title="first").json()
    second = _upload(client, auth_headers(alice), title="second").json()
    for _ in range(3):
        assert client.post(f"/api/videos/{first['id']}/views").status_code == 204
    client.post(f"/api/videos/{second['id']}/views")

    listed = client.get("/api/videos", params={"sort": "views"}).json()
    assert [(v["title"], v["views"]) for v in listed] == [("first", 3), ("second", 1)]


def test_view_on_unknown_video_still_succeeds(client):
    assert client.post("/api/videos/missing/views").status_code == 204


def test_edit_by_owner_and_non_owner(client, alice, bob, auth_headers):
    video = _upload(client, auth_headers(alice), title="Draft", visibility="PRIVATE").json()

    resp = client.patch(
        f"/api/videos/{video['id']}",
        headers=auth_headers(alice),
        json={"title": "Final", "visibility": VideoVisibility.PUBLIC.value},
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Final"
    assert resp.json()["visibility"] == "PUBLIC"

    resp = client.patch(f"/api/videos/{video['id']}", headers=auth_headers(bob), json={"title": "Mine now"})
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "not_authorized"

    resp = client.patch(f"/api/videos/{video['id']}", headers=auth_headers(alice), json={"title": "  "})
    assert resp.status_code == 422

    resp = client.patch(f"/api/videos/{video['id']}", headers=auth_headers(alice), json={"title": "x" * 256})
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "invalid_request"


def test_delete_flow(client, store, alice, bob, auth_headers):
    video = _upload(client, auth_headers(alice)).json()

    resp = client.delete(f"/api/videos/{video['id']}", headers=auth_headers(bob))
    assert resp.status_code == 403
    assert store.exists(video["asset_path"])

    resp = client.delete(f"/api/videos/{video['id']}", headers=auth_headers(alice))
    assert resp.status_code == 204
    assert not store.exists(video["asset_path"])
    assert client.get(f"/api/videos/{video['id']}").status_code == 404


def test_stream_supports_range(client, alice, auth_headers):
    video = _upload(client, auth_headers(alice)).json()

    full = client.get(f"/api/videos/{video['id']}/stream")
    assert full.status_code == 200
    assert full.content == MP4

    part = client.get(f"/api/videos/{video['id']}/stream", headers={"Range": "bytes=0-15"})
    assert part.status_code == 206
    assert part.headers["content-range"] == f"bytes 0-15/{len(MP4)}"
    assert part.content == MP4[:16]

    bad = client.get(f"/api/videos/{video['id']}/stream", headers={"Range": f"bytes={len(MP4) + 5}-"})
    assert bad.status_code == 416


def test_invalid_token_is_rejected(client):
    resp = client.get("/api/videos", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_upload_rejects_overlong_title(client, store, alice, auth_headers):
    resp = _upload(client, auth_headers(alice), title="x" * 256)
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "invalid_request"
    assert client.get("/api/videos").json() == []


def test_stream_with_missing_file(client, store, alice, auth_headers):
    video = _upload(client, auth_headers(alice)).json()
    store.delete(video["asset_path"])

    resp = client.get(f"/api/videos/{video['id']}/stream")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "not_found"


def test_delete_reports_record_failure(client, store, alice, auth_headers, monkeypatch):
    video = _upload(client, auth_headers(alice)).json()

    def failing_commit(self):
        raise OperationalError("DELETE FROM videos", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    resp = client.delete(f"/api/videos/{video['id']}", headers=auth_headers(alice))
    monkeypatch.undo()

    assert resp.status_code == 502
    assert resp.json()["error_code"] == "delete_partial_failure"
    assert resp.json()["video_id"] == video["id"]
    assert not store.exists(video["asset_path"])

    assert client.delete(f"/api/videos/{video['id']}", headers=auth_headers(alice)).status_code == 204
    assert client.get(f"/api/videos/{video['id']}").status_code == 404

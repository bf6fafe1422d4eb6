import pytest

from socialhub.db import models
from socialhub.db.models import PostStatus


def _setup(register, workspace, connect, platform="X"):
    _, headers = register()
    ws = workspace(headers)
    account_id = connect(headers, ws["id"], platform=platform)
    return headers, ws["id"], account_id


def _create(client, headers, ws_id, account_id, platform="X", **extra):
    body = {"title": "Launch", "content": "We are live", "platforms": [{"platform": platform, "account_id": account_id}]}
    body.update(extra)
    resp = client.post(f"/workspaces/{ws_id}/posts", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_post_is_draft_with_targets(client, register, workspace, connect):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    post = _create(client, headers, ws_id, account_id, media_urls=["https://cdn.example.com/a.png"])

    assert post["status"] == "DRAFT"
    assert post["media_urls"] == ["https://cdn.example.com/a.png"]
    assert post["platforms"][0]["platform"] == "X"
    assert post["platforms"][0]["status"] == "DRAFT"
    assert post["created_by"]["email"] == "owner@example.com"


def test_create_post_validates_targets(client, register, workspace, connect):
    headers, ws_id, account_id = _setup(register, workspace, connect)

    wrong_platform = client.post(f"/workspaces/{ws_id}/posts", headers=headers, json={
        "content": "hi", "platforms": [{"platform": "LINKEDIN", "account_id": account_id}],
    })
    assert wrong_platform.status_code == 400

    missing = client.post(f"/workspaces/{ws_id}/posts", headers=headers, json={
        "content": "hi", "platforms": [{"platform": "X", "account_id": 9999}],
    })
    assert missing.status_code == 404

    too_many_tags = client.post(f"/workspaces/{ws_id}/posts", headers=headers, json={
        "content": "hi", "platforms": [{"platform": "X", "account_id": account_id, "hashtags": [f"t{i}" for i in range(11)]}],
    })
    assert too_many_tags.status_code == 400
    assert "at most 10 hashtags" in too_many_tags.json()["detail"]


def test_list_posts_paginates_and_filters(client, register, workspace, connect):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    for _ in range(3):
        _create(client, headers, ws_id, account_id)

    page = client.get(f"/workspaces/{ws_id}/posts", params={"page": 2, "limit": 2}, headers=headers).json()
    assert page["meta"] == {"total": 3, "page": 2, "limit": 2, "total_pages": 2}
    assert len(page["data"]) == 1

    scheduled = client.get(f"/workspaces/{ws_id}/posts", params={"status": "SCHEDULED"}, headers=headers).json()
    assert scheduled["meta"]["total"] == 0


def test_posts_are_workspace_scoped(client, register, workspace, connect):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    post = _create(client, headers, ws_id, account_id)
    other = workspace(headers, slug="other")

    assert client.get(f"/workspaces/{other['id']}/posts/{post['id']}", headers=headers).status_code == 404
    _, stranger = register(email="stranger@example.com")
    assert client.get(f"/workspaces/{ws_id}/posts/{post['id']}", headers=stranger).status_code == 403


def test_schedule_normalizes_to_utc(client, register, workspace, connect):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    post = _create(client, headers, ws_id, account_id)

    resp = client.post(f"/workspaces/{ws_id}/posts/{post['id']}/schedule",
                       json={"scheduled_at": "2030-01-01T12:00:00+02:00"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "SCHEDULED"
    assert resp.json()["scheduled_at"].startswith("2030-01-01T10:00:00")


def test_schedule_requires_targets_and_schedulable_state(client, register, workspace, connect, db):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    bare = client.post(f"/workspaces/{ws_id}/posts", json={"content": "no targets"}, headers=headers).json()
    resp = client.post(f"/workspaces/{ws_id}/posts/{bare['id']}/schedule",
                       json={"scheduled_at": "2030-01-01T12:00:00Z"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Post has no target platforms"

    post = _create(client, headers, ws_id, account_id)
    row = db.get(models.Post, post["id"])
    row.status = PostStatus.PENDING_APPROVAL
    db.commit()
    resp = client.post(f"/workspaces/{ws_id}/posts/{post['id']}/schedule",
                       json={"scheduled_at": "2030-01-01T12:00:00Z"}, headers=headers)
    assert resp.status_code == 400


def test_update_and_delete_respect_publish_state(client, register, workspace, connect, db):
    headers, ws_id, account_id = _setup(register, workspace, connect)
    post = _create(client, headers, ws_id, account_id)

    resp = client.put(f"/workspaces/{ws_id}/posts/{post['id']}", json={"content": "Edited"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["content"] == "Edited"
    assert resp.json()["title"] == "Launch"

    row = db.get(models.Post, post["id"])
    row.status = PostStatus.PUBLISHING
    db.commit()
    assert client.put(f"/workspaces/{ws_id}/posts/{post['id']}", json={"content": "x"}, headers=headers).status_code == 400
    assert client.delete(f"/workspaces/{ws_id}/posts/{post['id']}", headers=headers).status_code == 400

    row.status = PostStatus.PUBLISHED
    db.commit()
    published = client.put(f"/workspaces/{ws_id}/posts/{post['id']}", json={"content": "x"}, headers=headers)
    assert published.status_code == 400
    assert published.json()["detail"] == "Cannot edit a post that is PUBLISHED"
    assert client.delete(f"/workspaces/{ws_id}/posts/{post['id']}", headers=headers).status_code == 200
    assert client.get(f"/workspaces/{ws_id}/posts/{post['id']}", headers=headers).status_code == 404


@pytest.mark.parametrize("platform, limit", [("META", 30), ("LINKEDIN", 5), ("TIKTOK", 100)])
def test_hashtag_limits_per_platform(client, register, workspace, connect, platform, limit):
    headers, ws_id, account_id = _setup(register, workspace, connect, platform=platform)

    def create(count):
        return client.post(f"/workspaces/{ws_id}/posts", headers=headers, json={
            "content": "hi",
            "platforms": [{"platform": platform, "account_id": account_id, "hashtags": [f"t{i}" for i in range(count)]}],
        })

    assert create(limit).status_code == 201
    over = create(limit + 1)
    assert over.status_code == 400
    assert over.json()["detail"] == f"{platform} allows at most {limit} hashtags"

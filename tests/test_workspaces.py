def test_create_workspace_seeds_roles_and_admin_owner(client, register, workspace):
    user_id, headers = register()
    ws = workspace(headers, slug="acme")

    assert {r["name"] for r in ws["roles"]} == {"Admin", "Publisher", "Creator", "Viewer"}
    assert [r["name"] for r in ws["roles"] if r["is_default"]] == ["Creator"]
    assert ws["owner_id"] == user_id

    detail = client.get(f"/workspaces/{ws['id']}", headers=headers).json()
    assert detail["members"][0]["user"]["id"] == user_id
    assert detail["members"][0]["role"]["permissions"] == ["*"]


def test_duplicate_slug_conflicts(client, register, workspace):
    _, headers = register()
    workspace(headers, slug="acme")
    resp = client.post("/workspaces", json={"name": "Other", "slug": "acme"}, headers=headers)
    assert resp.status_code == 409


def test_list_only_member_workspaces_with_counts(client, register, workspace):
    _, owner = register()
    _, other = register(email="other@example.com")
    workspace(owner, slug="acme")
    workspace(other, slug="globex")

    rows = client.get("/workspaces", headers=owner).json()
    assert [w["slug"] for w in rows] == ["acme"]
    assert rows[0]["counts"] == {"members": 1, "platform_accounts": 0, "posts": 0}


def test_get_workspace_membership_checks(client, register, workspace):
    _, owner = register()
    _, stranger = register(email="stranger@example.com")
    ws = workspace(owner)

    assert client.get(f"/workspaces/{ws['id']}", headers=stranger).status_code == 403
    assert client.get("/workspaces/9999", headers=owner).status_code == 404


def test_only_owner_updates_and_deletes(client, register, workspace, add_member):
    _, owner = register()
    ws = workspace(owner)
    _, admin = add_member(owner, ws, "admin@example.com", role_name="Admin")

    assert client.put(f"/workspaces/{ws['id']}", json={"name": "Renamed"}, headers=admin).status_code == 403
    resp = client.put(f"/workspaces/{ws['id']}", json={"name": "Renamed", "tier": "PRO"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["tier"] == "PRO"

    assert client.delete(f"/workspaces/{ws['id']}", headers=admin).status_code == 403
    assert client.delete(f"/workspaces/{ws['id']}", headers=owner).status_code == 200
    assert client.get(f"/workspaces/{ws['id']}", headers=owner).status_code == 404


def test_invite_member_rules(client, register, workspace, add_member):
    _, owner = register()
    ws = workspace(owner)
    creator_role = next(r["id"] for r in ws["roles"] if r["name"] == "Creator")

    resp = client.post(f"/workspaces/{ws['id']}/members", json={"email": "ghost@example.com", "role_id": creator_role},
                       headers=owner)
    assert resp.status_code == 404

    _, creator = add_member(owner, ws, "creator@example.com", role_name="Creator")
    again = client.post(f"/workspaces/{ws['id']}/members", json={"email": "creator@example.com", "role_id": creator_role},
                        headers=owner)
    assert again.status_code == 409

    register(email="third@example.com")
    not_admin = client.post(f"/workspaces/{ws['id']}/members", json={"email": "third@example.com", "role_id": creator_role},
                            headers=creator)
    assert not_admin.status_code == 403


def test_member_role_changes_and_owner_protection(client, register, workspace, add_member):
    owner_id, owner = register()
    ws = workspace(owner)
    member_id, _ = add_member(owner, ws, "member@example.com", role_name="Viewer")
    publisher_role = next(r["id"] for r in ws["roles"] if r["name"] == "Publisher")

    resp = client.put(f"/workspaces/{ws['id']}/members/{member_id}", json={"role_id": publisher_role}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["role"]["name"] == "Publisher"

    assert client.put(f"/workspaces/{ws['id']}/members/{owner_id}", json={"role_id": publisher_role},
                      headers=owner).status_code == 403
    assert client.delete(f"/workspaces/{ws['id']}/members/{owner_id}", headers=owner).status_code == 403
    assert client.delete(f"/workspaces/{ws['id']}/members/{member_id}", headers=owner).status_code == 200


def test_role_management(client, register, workspace, add_member):
    _, owner = register()
    ws = workspace(owner)

    created = client.post(f"/workspaces/{ws['id']}/roles", json={"name": "Editor", "permissions": ["posts.edit"]},
                          headers=owner)
    assert created.status_code == 201
    role_id = created.json()["id"]

    dup = client.post(f"/workspaces/{ws['id']}/roles", json={"name": "Editor", "permissions": []}, headers=owner)
    assert dup.status_code == 409
    clash = client.put(f"/workspaces/{ws['id']}/roles/{role_id}", json={"name": "Viewer"}, headers=owner)
    assert clash.status_code == 409

    ws["roles"].append(created.json())
    add_member(owner, ws, "editor@example.com", role_name="Editor")
    roles = {r["name"]: r for r in client.get(f"/workspaces/{ws['id']}/roles", headers=owner).json()}
    assert roles["Editor"]["member_count"] == 1
    assert roles["Admin"]["member_count"] == 1

    in_use = client.delete(f"/workspaces/{ws['id']}/roles/{role_id}", headers=owner)
    assert in_use.status_code == 409
    assert "Reassign members first" in in_use.json()["detail"]

    viewer_id = roles["Viewer"]["id"]
    assert client.delete(f"/workspaces/{ws['id']}/roles/{viewer_id}", headers=owner).status_code == 200

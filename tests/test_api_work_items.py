"""
Work item API tests — create, list, partial update, comments, delete.

Every operation is guarded by the same admin / creator / member rule
resolved against the item's project.
"""

import pytest

from trackboard.models import db
from trackboard.models.project import ProjectMember
from trackboard.models.work_item import WORK_ITEM_STATUSES, WorkItem
from trackboard.services import work_item_service


@pytest.fixture()
def member_bob(client, alice, bob, project):
    client.post(
        f"/api/projects/{project['id']}/members",
        json={"email": bob["email"]},
        headers=alice["headers"],
    )
    return bob


def _url(project, item=None, suffix=""):
    url = f"/api/projects/{project['id']}/workitems"
    if item is not None:
        url += f"/{item['id']}"
    return url + suffix


def _create(client, user, project, **fields):
    fields.setdefault("title", "Rotate certificates")
    return client.post(_url(project), json=fields, headers=user["headers"])


@pytest.fixture()
def item(client, alice, project):
    res = _create(client, alice, project, description="Before expiry")
    assert res.status_code == 201
    return res.get_json()


# ═══════════════════════════════════════════════════════════════
# CREATE
# ═══════════════════════════════════════════════════════════════

class TestCreateWorkItem:
    def test_defaults(self, client, alice, project):
        res = _create(client, alice, project)
        assert res.status_code == 201
        body = res.get_json()
        assert body["status"] == "To Do"
        assert body["description"] == ""
        assert body["assignedTo"] is None
        assert body["projectId"] == project["id"]
        assert body["createdBy"]["id"] == alice["id"]
        assert body["comments"] == []

    @pytest.mark.parametrize("status", WORK_ITEM_STATUSES)
    def test_any_known_status(self, client, alice, project, status):
        res = _create(client, alice, project, status=status)
        assert res.status_code == 201
        assert res.get_json()["status"] == status

    def test_unknown_status(self, client, alice, project):
        assert _create(client, alice, project, status="Blocked").status_code == 400

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_title_required(self, client, alice, project, title):
        assert _create(client, alice, project, title=title).status_code == 400

    def test_with_assignee(self, client, alice, member_bob, project):
        res = _create(client, alice, project, assignedTo=member_bob["id"])
        assert res.status_code == 201
        assert res.get_json()["assignedTo"] == {
            "id": member_bob["id"], "username": "bob", "email": "bob@acme.io",
        }

    def test_unknown_assignee(self, client, alice, project):
        res = _create(client, alice, project, assignedTo="no-such-user")
        assert res.status_code == 404

    def test_member_may_create(self, client, member_bob, project):
        assert _create(client, member_bob, project).status_code == 201

    def test_admin_may_create_without_membership(self, client, admin, project):
        assert _create(client, admin, project).status_code == 201

    def test_outsider_forbidden(self, client, carol, project):
        res = _create(client, carol, project)
        assert res.status_code == 403
        assert res.get_json()["error"] == "Forbidden: Only project members can add work items."

    def test_unknown_project(self, client, alice):
        assert _create(client, alice, {"id": "missing"}).status_code == 404

    def test_membership_revoked_after_check_does_not_undo_create(
        self, client, monkeypatch, member_bob, project
    ):
        """Access is checked once per request without locking; a removal that
        lands between the check and the write does not roll the write back."""
        real_check = work_item_service.check_project_access

        def check_then_revoke(caller, proj, message=None):
            real_check(caller, proj, message)
            ProjectMember.query.filter_by(
                project_id=proj.id, user_id=member_bob["id"]
            ).delete()
            db.session.commit()

        monkeypatch.setattr(work_item_service, "check_project_access", check_then_revoke)
        res = _create(client, member_bob, project, title="Late write")
        monkeypatch.undo()

        assert res.status_code == 201
        assert WorkItem.query.filter_by(id=res.get_json()["id"]).count() == 1
        assert ProjectMember.query.filter_by(user_id=member_bob["id"]).count() == 0
        assert _create(client, member_bob, project).status_code == 403


# ═══════════════════════════════════════════════════════════════
# LIST
# ═══════════════════════════════════════════════════════════════

class TestListWorkItems:
    def test_creation_order(self, client, alice, project):
        for title in ("first", "second", "third"):
            _create(client, alice, project, title=title)
        res = client.get(_url(project), headers=alice["headers"])
        assert res.status_code == 200
        assert [i["title"] for i in res.get_json()] == ["first", "second", "third"]

    def test_scoped_to_project(self, client, alice, project):
        other = client.post(
            "/api/projects", json={"name": "Other"}, headers=alice["headers"],
        ).get_json()
        _create(client, alice, project, title="here")
        _create(client, alice, other, title="there")
        res = client.get(_url(project), headers=alice["headers"])
        assert [i["title"] for i in res.get_json()] == ["here"]

    def test_outsider_forbidden(self, client, carol, project):
        assert client.get(_url(project), headers=carol["headers"]).status_code == 403

    def test_unknown_project(self, client, alice):
        res = client.get(_url({"id": "missing"}), headers=alice["headers"])
        assert res.status_code == 404


# ═══════════════════════════════════════════════════════════════
# UPDATE
# ═══════════════════════════════════════════════════════════════

class TestUpdateWorkItem:
    def _put(self, client, user, project, item, body):
        return client.put(_url(project, item), json=body, headers=user["headers"])

    def _read(self, client, user, project, item):
        items = client.get(_url(project), headers=user["headers"]).get_json()
        return next(i for i in items if i["id"] == item["id"])

    def test_status_only_leaves_other_fields(self, client, alice, member_bob, project):
        item = _create(
            client, alice, project,
            title="Upgrade DB", description="pg 16", assignedTo=member_bob["id"],
        ).get_json()

        res = self._put(client, alice, project, item, {"status": "Done"})
        assert res.status_code == 200

        stored = self._read(client, alice, project, item)
        assert stored["status"] == "Done"
        assert stored["title"] == "Upgrade DB"
        assert stored["description"] == "pg 16"
        assert stored["assignedTo"]["id"] == member_bob["id"]

    def test_null_assignee_clears(self, client, alice, member_bob, project):
        item = _create(client, alice, project, assignedTo=member_bob["id"]).get_json()
        res = self._put(client, alice, project, item, {"assignedTo": None})
        assert res.status_code == 200
        assert self._read(client, alice, project, item)["assignedTo"] is None

    def test_assign_and_edit_text(self, client, alice, member_bob, project, item):
        res = self._put(client, alice, project, item, {
            "title": "Rotate all certificates",
            "description": "",
            "assignedTo": member_bob["id"],
        })
        body = res.get_json()
        assert body["title"] == "Rotate all certificates"
        assert body["description"] == ""
        assert body["assignedTo"]["username"] == "bob"
        assert body["status"] == "To Do"

    def test_any_status_may_follow_any_other(self, client, alice, project, item):
        for status in ("Done", "Backlog", "Cancelled", "In Progress", "To Do", "Done"):
            res = self._put(client, alice, project, item, {"status": status})
            assert res.status_code == 200
            assert res.get_json()["status"] == status

    def test_blank_title_rejected_without_side_effects(self, client, alice, project, item):
        res = self._put(client, alice, project, item, {"title": "  ", "status": "Done"})
        assert res.status_code == 400
        stored = self._read(client, alice, project, item)
        assert stored["title"] == "Rotate certificates"
        assert stored["status"] == "To Do"

    def test_unknown_status(self, client, alice, project, item):
        assert self._put(client, alice, project, item, {"status": "Blocked"}).status_code == 400

    def test_unknown_assignee(self, client, alice, project, item):
        assert self._put(client, alice, project, item, {"assignedTo": "ghost"}).status_code == 404

    def test_member_may_update(self, client, member_bob, project, item):
        res = self._put(client, member_bob, project, item, {"status": "In Progress"})
        assert res.status_code == 200

    def test_outsider_forbidden(self, client, carol, project, item):
        assert self._put(client, carol, project, item, {"status": "Done"}).status_code == 403

    def test_unknown_item(self, client, alice, project):
        res = self._put(client, alice, project, {"id": "missing"}, {"status": "Done"})
        assert res.status_code == 404

    def test_item_of_another_project_is_not_found(self, client, alice, project, item):
        other = client.post(
            "/api/projects", json={"name": "Other"}, headers=alice["headers"],
        ).get_json()
        res = self._put(client, alice, other, item, {"status": "Done"})
        assert res.status_code == 404


# ═══════════════════════════════════════════════════════════════
# COMMENTS
# ═══════════════════════════════════════════════════════════════

class TestComments:
    def _comment(self, client, user, project, item, content):
        return client.post(
            _url(project, item, "/comments"),
            json={"content": content},
            headers=user["headers"],
        )

    def test_append_preserves_order(self, client, alice, member_bob, project, item):
        self._comment(client, alice, project, item, "C1")
        res = self._comment(client, member_bob, project, item, "C2")
        assert res.status_code == 201

        comments = res.get_json()["comments"]
        assert [c["text"] for c in comments] == ["C1", "C2"]
        assert comments[0]["author"]["username"] == "alice"
        assert comments[1]["author"]["username"] == "bob"
        assert comments[0]["createdAt"]

        listed = client.get(_url(project), headers=alice["headers"]).get_json()
        assert [c["text"] for c in listed[0]["comments"]] == ["C1", "C2"]

    def test_blank_content(self, client, alice, project, item):
        assert self._comment(client, alice, project, item, " ").status_code == 400

    def test_outsider_forbidden(self, client, carol, project, item):
        assert self._comment(client, carol, project, item, "hi").status_code == 403

    def test_admin_may_comment(self, client, admin, project, item):
        assert self._comment(client, admin, project, item, "ack").status_code == 201

    def test_unknown_item(self, client, alice, project):
        res = self._comment(client, alice, project, {"id": "missing"}, "hi")
        assert res.status_code == 404


# ═══════════════════════════════════════════════════════════════
# DELETE
# ═══════════════════════════════════════════════════════════════

class TestDeleteWorkItem:
    def test_member_deletes(self, client, alice, member_bob, project, item):
        res = client.delete(_url(project, item), headers=member_bob["headers"])
        assert res.status_code == 200
        assert client.get(_url(project), headers=alice["headers"]).get_json() == []

    def test_outsider_forbidden(self, client, carol, project, item):
        assert client.delete(_url(project, item), headers=carol["headers"]).status_code == 403

    def test_unknown_item(self, client, alice, project):
        res = client.delete(_url(project, {"id": "missing"}), headers=alice["headers"])
        assert res.status_code == 404

"""Tests for direct shares between users."""

from akaashpeti.models import SharedItem
from tests.conftest import upload


def _share(client, headers, **body):
    body.setdefault("item_type", "file")
    return client.post("/api/share", json=body, headers=headers)


class TestCreateShare:

    def test_share_by_email(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, alice["headers"], item_id=file_id, email="bob@example.com")
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Item shared successfully"
        shared = body["shared_item"]
        assert shared["shared_with"] == bob["user"]["id"]
        assert shared["owner_id"] == alice["user"]["id"]
        assert shared["role"] == "viewer"

    def test_share_by_user_id_with_access_level_alias(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(
            client, alice["headers"], item_id=file_id,
            shared_with=bob["user"]["id"], access_level="editor",
        )
        assert resp.status_code == 201
        assert resp.json()["shared_item"]["role"] == "editor"

    def test_sharing_again_updates_role(self, client, alice, bob, db):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        first = _share(client, alice["headers"], item_id=file_id, email="bob@example.com").json()
        second = _share(client, alice["headers"], item_id=file_id, email="bob@example.com", role="editor")

        assert second.status_code == 201
        assert second.json()["message"] == "Share updated"
        assert second.json()["shared_item"]["id"] == first["shared_item"]["id"]
        assert db.query(SharedItem).count() == 1

    def test_share_folder(self, client, alice, bob):
        folder_id = client.post("/api/folders", json={"name": "team"}, headers=alice["headers"]).json()["folder"]["id"]
        resp = _share(client, alice["headers"], item_type="folder", item_id=folder_id, email="bob@example.com")
        assert resp.status_code == 201
        contents = client.get(f"/api/folders/{folder_id}/contents", headers=bob["headers"])
        assert contents.status_code == 200

    def test_unknown_recipient_is_404(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, alice["headers"], item_id=file_id, email="nobody@example.com")
        assert resp.status_code == 404
        assert resp.json()["error"] == "USER_NOT_FOUND"

    def test_missing_recipient_is_400(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, alice["headers"], item_id=file_id)
        assert resp.status_code == 400

    def test_invalid_role_is_400(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, alice["headers"], item_id=file_id, email="bob@example.com", role="admin")
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "role"

    def test_self_share_is_400(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, alice["headers"], item_id=file_id, email="alice@example.com")
        assert resp.status_code == 400

    def test_non_owner_cannot_share(self, client, alice, bob, carol):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        _share(client, alice["headers"], item_id=file_id, email="bob@example.com", role="editor")
        # Grants are not transitive.
        resp = _share(client, bob["headers"], item_id=file_id, email="carol@example.com")
        assert resp.status_code == 403

    def test_stranger_cannot_share(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = _share(client, bob["headers"], item_id=file_id, email="alice@example.com")
        assert resp.status_code == 403
        assert resp.json()["error"] == "ACCESS_DENIED"

    def test_trashed_item_cannot_be_shared(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        client.delete(f"/api/files/{file_id}", headers=alice["headers"])
        resp = _share(client, alice["headers"], item_id=file_id, email="bob@example.com")
        assert resp.status_code == 400


class TestListShares:

    def test_shared_with_me_and_by_me_carry_item_names(self, client, alice, bob):
        file_id = upload(client, alice["headers"], name="plan.pdf").json()["file"]["id"]
        _share(client, alice["headers"], item_id=file_id, email="bob@example.com")

        with_me = client.get("/api/share/shared-with-me", headers=bob["headers"]).json()["shared_with_me"]
        assert [(s["item_id"], s["item_name"]) for s in with_me] == [(file_id, "plan.pdf")]

        by_me = client.get("/api/share/shared-by-me", headers=alice["headers"]).json()["shared_by_me"]
        assert [(s["item_id"], s["item_name"]) for s in by_me] == [(file_id, "plan.pdf")]

        assert client.get("/api/share/shared-with-me", headers=alice["headers"]).json()["shared_with_me"] == []

    def test_trashed_items_drop_out_of_shared_with_me(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        _share(client, alice["headers"], item_id=file_id, email="bob@example.com")
        client.delete(f"/api/files/{file_id}", headers=alice["headers"])

        assert client.get("/api/share/shared-with-me", headers=bob["headers"]).json()["shared_with_me"] == []
        # The owner still sees the grant.
        assert len(client.get("/api/share/shared-by-me", headers=alice["headers"]).json()["shared_by_me"]) == 1


class TestRevokeShare:

    def test_owner_revokes(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        share_id = _share(client, alice["headers"], item_id=file_id, email="bob@example.com").json()["shared_item"]["id"]

        resp = client.delete(f"/api/share/{share_id}", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["message"] == "Share revoked"
        assert client.get(f"/api/files/{file_id}", headers=bob["headers"]).status_code == 403

    def test_recipient_can_leave(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        share_id = _share(client, alice["headers"], item_id=file_id, email="bob@example.com").json()["shared_item"]["id"]
        assert client.delete(f"/api/share/{share_id}", headers=bob["headers"]).status_code == 200

    def test_third_party_gets_404(self, client, alice, bob, carol):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        share_id = _share(client, alice["headers"], item_id=file_id, email="bob@example.com").json()["shared_item"]["id"]
        resp = client.delete(f"/api/share/{share_id}", headers=carol["headers"])
        assert resp.status_code == 404
        assert resp.json()["error"] == "SHARED_ITEM_NOT_FOUND"

    def test_unknown_share_is_404(self, client, alice):
        assert client.delete("/api/share/nope", headers=alice["headers"]).status_code == 404

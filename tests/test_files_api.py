"""Tests for the file API endpoints."""

from datetime import datetime, timedelta, timezone

from akaashpeti.models import AuditLog, File
from tests.conftest import upload


def _share(client, owner, item_id, email, role="viewer", item_type="file"):
    resp = client.post(
        "/api/share",
        json={"item_type": item_type, "item_id": item_id, "email": email, "role": role},
        headers=owner["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["shared_item"]


class TestUpload:

    def test_upload_to_object_store(self, client, alice, object_store):
        resp = upload(client, alice["headers"])
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Uploaded to object storage"
        record = body["file"]
        assert record["name"] == "report.pdf"
        assert record["mime_type"] == "application/pdf"
        assert record["size_bytes"] == len(b"%PDF-1.4 test")
        assert record["storage_backend"] == "supabase"
        assert record["owner_id"] == alice["user"]["id"]
        assert "storage_path" not in record
        assert record["storage_key"] in object_store.objects

    def test_upload_falls_back_to_disk(self, client, alice, object_store, local_store):
        object_store.fail_puts = True
        resp = upload(client, alice["headers"], name="notes.txt", content=b"hi", mime_type="text/plain")
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "File saved locally"
        assert body["file"]["storage_backend"] == "local"
        assert (local_store.root / body["file"]["storage_key"]).read_bytes() == b"hi"

    def test_upload_into_folder(self, client, alice):
        folder = client.post("/api/folders", json={"name": "docs"}, headers=alice["headers"]).json()["folder"]
        resp = upload(client, alice["headers"], folder_id=folder["id"])
        assert resp.json()["file"]["folder_id"] == folder["id"]

    def test_upload_into_someone_elses_folder_is_404(self, client, alice, bob):
        folder = client.post("/api/folders", json={"name": "docs"}, headers=alice["headers"]).json()["folder"]
        resp = upload(client, bob["headers"], folder_id=folder["id"])
        assert resp.status_code == 404
        assert resp.json()["error"] == "FOLDER_NOT_FOUND"

    def test_no_file_is_400(self, client, alice):
        resp = client.post("/api/files", data={}, headers=alice["headers"])
        assert resp.status_code == 400
        assert resp.json()["message"] == "No file uploaded"

    def test_both_backends_down_is_500(self, client, alice, object_store, local_store, db):
        object_store.fail_puts = True
        local_store.root.parent.mkdir(parents=True, exist_ok=True)
        local_store.root.write_text("occupied by a regular file")
        resp = upload(client, alice["headers"])
        assert resp.status_code == 500
        assert resp.json()["error"] == "PERSISTENCE_FAILED"
        assert resp.json()["details"] == {"primary": "unavailable", "fallback": "unavailable"}
        # Server filesystem paths stay out of the response.
        assert str(local_store.root) not in resp.text
        assert db.query(File).count() == 0

    def test_long_name_upload_can_be_renamed_to_itself(self, client, alice):
        resp = upload(client, alice["headers"], name="a" * 300 + ".pdf")
        assert resp.status_code == 200
        record = resp.json()["file"]
        assert len(record["name"]) <= 255
        assert record["name"].endswith(".pdf")

        rename = client.patch(f"/api/files/{record['id']}", json={"name": record["name"]}, headers=alice["headers"])
        assert rename.status_code == 200

    def test_long_name_upload_falls_back_to_disk(self, client, alice, object_store, local_store):
        object_store.fail_puts = True
        resp = upload(client, alice["headers"], name="a" * 300 + ".pdf", content=b"long")
        assert resp.status_code == 200
        record = resp.json()["file"]
        assert record["storage_backend"] == "local"
        assert (local_store.root / record["storage_key"]).read_bytes() == b"long"

    def test_upload_under_trashed_ancestor_is_404(self, client, alice):
        top = client.post("/api/folders", json={"name": "top"}, headers=alice["headers"]).json()["folder"]["id"]
        child = client.post(
            "/api/folders", json={"name": "child", "parent_id": top}, headers=alice["headers"]
        ).json()["folder"]["id"]
        client.delete(f"/api/folders/{top}", headers=alice["headers"])

        resp = upload(client, alice["headers"], folder_id=child)
        assert resp.status_code == 404
        assert resp.json()["error"] == "FOLDER_NOT_FOUND"

    def test_requires_auth(self, client):
        assert upload(client, {}).status_code == 401


class TestReadAndRename:

    def test_list_only_own_active_files(self, client, alice, bob):
        upload(client, alice["headers"], name="a.pdf")
        trashed = upload(client, alice["headers"], name="b.pdf").json()["file"]
        upload(client, bob["headers"], name="c.pdf")
        client.delete(f"/api/files/{trashed['id']}", headers=alice["headers"])

        names = [f["name"] for f in client.get("/api/files", headers=alice["headers"]).json()["files"]]
        assert names == ["a.pdf"]

    def test_get_file(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.get(f"/api/files/{file_id}", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["file"]["id"] == file_id

    def test_get_missing_file_is_404(self, client, alice):
        resp = client.get("/api/files/nope", headers=alice["headers"])
        assert resp.status_code == 404
        assert resp.json()["error"] == "FILE_NOT_FOUND"

    def test_stranger_is_403(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.get(f"/api/files/{file_id}", headers=bob["headers"])
        assert resp.status_code == 403
        assert resp.json()["error"] == "ACCESS_DENIED"

    def test_rename_accepts_new_name_alias(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.patch(f"/api/files/{file_id}", json={"newName": "final.pdf"}, headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["file"]["name"] == "final.pdf"

    def test_rename_rejects_bad_names(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        for bad in ["", "   ", "a/b", "..", "x" * 256]:
            resp = client.patch(f"/api/files/{file_id}", json={"name": bad}, headers=alice["headers"])
            assert resp.status_code == 400, bad

    def test_editor_can_rename(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        _share(client, alice, file_id, "bob@example.com", role="editor")
        resp = client.patch(f"/api/files/{file_id}", json={"name": "edited.pdf"}, headers=bob["headers"])
        assert resp.status_code == 200
        assert resp.json()["file"]["name"] == "edited.pdf"


class TestDownload:

    def test_owner_download_url(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.get(f"/api/files/{file_id}/download", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["url"].startswith("https://storage.test/")

    def test_local_download_url_serves_bytes(self, client, alice, object_store):
        object_store.fail_puts = True
        file_id = upload(client, alice["headers"], content=b"local bytes").json()["file"]["id"]
        url = client.get(f"/api/files/{file_id}/download", headers=alice["headers"]).json()["url"]

        resp = client.get(url)
        assert resp.status_code == 200
        assert resp.content == b"local bytes"

    def test_stranger_cannot_download(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.get(f"/api/files/{file_id}/download", headers=bob["headers"])
        assert resp.status_code == 403


class TestTrashAndRestore:

    def test_trash_then_restore(self, client, alice, db):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]

        resp = client.delete(f"/api/files/{file_id}", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["message"] == "File moved to trash"
        assert resp.json()["file"]["is_deleted"] is True

        resp = client.patch(f"/api/files/restore/{file_id}", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["file"]["is_deleted"] is False

        actions = [a.action for a in db.query(AuditLog).filter(AuditLog.resource_id == file_id)]
        assert "trash" in actions and "restore" in actions

    def test_restore_active_file_is_noop(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.patch(f"/api/files/restore/{file_id}", headers=alice["headers"])
        assert resp.status_code == 200
        assert resp.json()["file"]["is_deleted"] is False

    def test_trash_is_owner_only(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        _share(client, alice, file_id, "bob@example.com", role="editor")
        resp = client.delete(f"/api/files/{file_id}", headers=bob["headers"])
        assert resp.status_code == 404

    def test_trashed_file_hidden_from_collaborator(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        _share(client, alice, file_id, "bob@example.com")
        client.delete(f"/api/files/{file_id}", headers=alice["headers"])

        assert client.get(f"/api/files/{file_id}", headers=bob["headers"]).status_code == 404
        assert client.get(f"/api/files/{file_id}", headers=alice["headers"]).status_code == 200


class TestShareAndLinkFlow:
    """Owner uploads, shares read-only, then publishes a link that has already lapsed."""

    def test_viewer_reads_cannot_write_and_expired_link_is_gone(self, client, alice, bob):
        file_id = upload(client, alice["headers"], name="report.pdf").json()["file"]["id"]
        _share(client, alice, file_id, "bob@example.com", role="viewer")

        download = client.get(f"/api/files/{file_id}/download", headers=bob["headers"])
        assert download.status_code == 200
        assert download.json()["url"]

        rename = client.patch(f"/api/files/{file_id}", json={"name": "mine.pdf"}, headers=bob["headers"])
        assert rename.status_code == 403
        assert rename.json()["error"] == "INSUFFICIENT_ROLE"

        expires_at = (datetime.now(timezone.utc) - timedelta(seconds=1)).isoformat()
        link = client.post(
            "/api/link-shares",
            json={"resource_id": file_id, "resource_type": "file", "expires_at": expires_at},
            headers=alice["headers"],
        )
        assert link.status_code == 201
        resp = client.get(f"/api/link-shares/{link.json()['share']['token']}")
        assert resp.status_code == 410

"""Tests for public share links: creation, resolution, expiry and revocation."""

from datetime import datetime, timedelta, timezone

import pytest

from akaashpeti.exceptions import (
    FileRecordNotFoundError,
    LinkExpiredError,
    LinkShareNotFoundError,
)
from akaashpeti.models import Folder, LinkShare
from akaashpeti.services import LinkResolver, LinkShareService
from tests.conftest import make_user, upload


def _iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


class TestLinkResolver:
    """Service-level resolution, with an injectable clock."""

    @pytest.fixture()
    def owner(self, db):
        return make_user(db, "owner@example.com")

    @pytest.fixture()
    def stored_file(self, gateway, owner):
        return gateway.store(owner.id, None, "photo.png", "image/png", 4, b"\x89PNG")

    def test_file_link_carries_signed_url(self, db, gateway, owner, stored_file):
        link = LinkShareService(db).create(owner.id, "file", stored_file.id)
        resolved = LinkResolver(db, gateway).resolve(link.token)
        assert resolved.resource_type == "file"
        assert resolved.resource.id == stored_file.id
        assert resolved.signed_url.startswith("https://storage.test/")
        assert "expires_in=3600" in resolved.signed_url

    def test_null_expiry_never_expires(self, db, gateway, owner, stored_file):
        link = LinkShareService(db).create(owner.id, "file", stored_file.id, expires_at=None)
        far_future = datetime(2999, 1, 1, tzinfo=timezone.utc)
        resolved = LinkResolver(db, gateway).resolve(link.token, now=far_future)
        assert resolved.resource.id == stored_file.id

    def test_expiry_is_checked_at_read_time(self, db, gateway, owner, stored_file):
        expires_at = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
        link = LinkShareService(db).create(owner.id, "file", stored_file.id, expires_at=expires_at)
        resolver = LinkResolver(db, gateway)

        assert resolver.resolve(link.token, now=expires_at - timedelta(seconds=1))
        with pytest.raises(LinkExpiredError) as exc:
            resolver.resolve(link.token, now=expires_at + timedelta(seconds=1))
        assert exc.value.status_code == 410
        # The row survives expiry.
        assert db.query(LinkShare).filter(LinkShare.id == link.id).count() == 1

    def test_naive_expiry_is_treated_as_utc(self, db, gateway, owner, stored_file):
        link = LinkShareService(db).create(
            owner.id, "file", stored_file.id, expires_at=datetime(2030, 6, 1, 12, 0)
        )
        with pytest.raises(LinkExpiredError):
            LinkResolver(db, gateway).resolve(
                link.token, now=datetime(2030, 6, 1, 12, 1, tzinfo=timezone.utc)
            )

    def test_unknown_token(self, db, gateway):
        with pytest.raises(LinkShareNotFoundError) as exc:
            LinkResolver(db, gateway).resolve("no-such-token")
        assert exc.value.message == "Invalid or expired link"

    def test_trashed_file_is_not_found(self, db, gateway, owner, stored_file):
        link = LinkShareService(db).create(owner.id, "file", stored_file.id)
        stored_file.is_deleted = True
        db.commit()
        with pytest.raises(FileRecordNotFoundError):
            LinkResolver(db, gateway).resolve(link.token)

    def test_folder_link_lists_direct_files_only(self, db, gateway, owner):
        top = Folder(name="top", owner_id=owner.id)
        db.add(top)
        db.commit()
        nested = Folder(name="nested", owner_id=owner.id, parent_id=top.id)
        db.add(nested)
        db.commit()

        direct = gateway.store(owner.id, top.id, "direct.txt", "text/plain", 1, b"a")
        gateway.store(owner.id, nested.id, "deep.txt", "text/plain", 1, b"b")
        trashed = gateway.store(owner.id, top.id, "gone.txt", "text/plain", 1, b"c")
        trashed.is_deleted = True
        db.commit()

        link = LinkShareService(db).create(owner.id, "folder", top.id)
        resolved = LinkResolver(db, gateway).resolve(link.token)
        assert resolved.resource_type == "folder"
        assert [f.id for f in resolved.contents] == [direct.id]
        assert resolved.signed_url is None

    def test_tokens_are_unique_and_long(self, db, owner, stored_file):
        service = LinkShareService(db)
        tokens = {service.create(owner.id, "file", stored_file.id).token for _ in range(5)}
        assert len(tokens) == 5
        assert all(len(t) >= 43 for t in tokens)


class TestLinkShareApi:

    def test_create_and_resolve_file_link(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        resp = client.post(
            "/api/link-shares",
            json={"resource_id": file_id, "resource_type": "file"},
            headers=alice["headers"],
        )
        assert resp.status_code == 201
        body = resp.json()
        token = body["share"]["token"]
        assert body["link"].endswith(f"/api/link-shares/{token}")
        assert body["share"]["expires_at"] is None

        # No auth header: the token is the credential.
        resolved = client.get(f"/api/link-shares/{token}")
        assert resolved.status_code == 200
        data = resolved.json()
        assert data["link_share"]["id"] == body["share"]["id"]
        assert data["resource"]["resource_type"] == "file"
        assert data["resource"]["id"] == file_id
        assert data["resource"]["signed_url"]

    def test_folder_link_returns_contents(self, client, alice):
        folder_id = client.post("/api/folders", json={"name": "album"}, headers=alice["headers"]).json()["folder"]["id"]
        upload(client, alice["headers"], name="a.jpg", folder_id=folder_id)
        token = client.post(
            "/api/link-shares",
            json={"resource_id": folder_id, "resource_type": "folder"},
            headers=alice["headers"],
        ).json()["share"]["token"]

        data = client.get(f"/api/link-shares/{token}").json()
        assert data["resource"]["resource_type"] == "folder"
        assert [f["name"] for f in data["resource"]["contents"]] == ["a.jpg"]

    def test_expired_link_is_410(self, client, alice):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        token = client.post(
            "/api/link-shares",
            json={"resource_id": file_id, "resource_type": "file", "expires_at": _iso(-timedelta(seconds=1))},
            headers=alice["headers"],
        ).json()["share"]["token"]

        resp = client.get(f"/api/link-shares/{token}")
        assert resp.status_code == 410
        assert resp.json()["error"] == "LINK_EXPIRED"

    def test_unknown_token_is_404(self, client):
        resp = client.get("/api/link-shares/not-a-real-token")
        assert resp.status_code == 404
        assert resp.json()["error"] == "LINK_SHARE_NOT_FOUND"

    def test_only_owner_can_create(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        client.post(
            "/api/share",
            json={"item_type": "file", "item_id": file_id, "email": "bob@example.com", "role": "editor"},
            headers=alice["headers"],
        )
        resp = client.post(
            "/api/link-shares",
            json={"resource_id": file_id, "resource_type": "file"},
            headers=bob["headers"],
        )
        assert resp.status_code == 403

    def test_bad_resource_type_is_400(self, client, alice):
        resp = client.post(
            "/api/link-shares",
            json={"resource_id": "x", "resource_type": "album"},
            headers=alice["headers"],
        )
        assert resp.status_code == 400

    def test_list_and_revoke(self, client, alice, bob):
        file_id = upload(client, alice["headers"]).json()["file"]["id"]
        link = client.post(
            "/api/link-shares",
            json={"resource_id": file_id, "resource_type": "file"},
            headers=alice["headers"],
        ).json()["share"]

        links = client.get("/api/link-shares", headers=alice["headers"]).json()["links"]
        assert [l["id"] for l in links] == [link["id"]]
        assert client.get("/api/link-shares", headers=bob["headers"]).json()["links"] == []

        # Someone else's link looks like a missing one.
        assert client.delete(f"/api/link-shares/{link['id']}", headers=bob["headers"]).status_code == 404

        resp = client.delete(f"/api/link-shares/{link['id']}", headers=alice["headers"])
        assert resp.status_code == 200
        assert client.get(f"/api/link-shares/{link['token']}").status_code == 404

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi.testclient import TestClient

from gallery_quest.core.security import create_jwt
from gallery_quest.db.models.base import Base
from gallery_quest.main import create_app


def _create_app(tmp_path: Path, monkeypatch, name: str):
    db_url = "sqlite+aiosqlite:///" + (tmp_path / f"{name}.db").as_posix()
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("SECRET_KEY", "secret_test")
    monkeypatch.setenv("EDITOR_USERNAME", "editor")
    monkeypatch.setenv("MEDIA_BASE_URL", "/uploads")

    app = create_app()

    async def _migrate() -> None:
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await app.state.engine.dispose()

    asyncio.run(_migrate())
    return app


def _headers() -> dict[str, str]:
    token = create_jwt(secret_key="secret_test", subject="editor", ttl_s=3600)
    return {"Authorization": f"Bearer {token}"}


def test_editor_create_tags_and_list(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_tags")
    headers = _headers()

    with TestClient(app) as client:
        resp = client.post("/editor/api/tags", json={"category": "character", "name": "Alice Liddell"}, headers=headers)
        assert resp.status_code == 200
        tag = resp.json()["tag"]
        assert tag["slug"] == "alice-liddell"
        assert tag["category"] == "character"

        resp = client.post(
            "/editor/api/tags",
            json={"category": "character", "name": "Alice (alt)", "slug": "Alice Liddell"},
            headers=headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "bad_request"
        assert body["details"] == {"category": "character", "slug": "alice-liddell"}

        # Same slug in a different category is allowed.
        resp = client.post("/editor/api/tags", json={"category": "artist", "name": "Alice Liddell"}, headers=headers)
        assert resp.status_code == 200

        resp = client.post("/editor/api/tags", json={"category": "series", "name": "X"}, headers=headers)
        assert resp.status_code == 400

        resp = client.post("/editor/api/tags", json={"category": "rarity", "name": "!!!"}, headers=headers)
        assert resp.status_code == 400

        resp = client.get("/gallery-quest/v1/tags", params={"category": "character"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["items"] == [{"id": tag["id"], "name": "Alice Liddell", "slug": "alice-liddell", "count_images": 0}]

        resp = client.get("/gallery-quest/v1/tags", params={"category": "nope"})
        assert resp.status_code == 400


def test_editor_image_update_invalidates_referencing_galleries(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_images")
    headers = _headers()

    with TestClient(app) as client:
        resp = client.post(
            "/editor/api/images",
            json={"title": "Card", "alt": "A card", "file_path": "/2025/10/card.png", "width": 900, "height": 1200},
            headers=headers,
        )
        assert resp.status_code == 200
        image = resp.json()["image"]
        image_id = image["id"]
        assert image["card_number"] == ""
        assert image["urls"]["full"] == "/uploads/2025/10/card.png"
        assert image["urls"]["thumb"] == "/uploads/2025/10/card-300x400.png"
        assert image["taxonomies"] == {"character": [], "artist": [], "rarity": []}

        tag_id = client.post(
            "/editor/api/tags", json={"category": "rarity", "name": "Ultra Rare"}, headers=headers
        ).json()["tag"]["id"]
        other_tag_id = client.post(
            "/editor/api/tags", json={"category": "artist", "name": "Bob"}, headers=headers
        ).json()["tag"]["id"]

        g1 = client.post("/editor/api/galleries", json={"title": "G1", "image_ids": [image_id]}, headers=headers)
        g2 = client.post("/editor/api/galleries", json={"title": "G2", "image_ids": []}, headers=headers)
        g1_id = g1.json()["gallery"]["id"]
        g2_id = g2.json()["gallery"]["id"]

        before = client.get(f"/gallery-quest/v1/images/{g1_id}", params={"rarity": "ultra-rare"}).json()
        assert before == {"items": [], "total": 0, "pages": 0}

        resp = client.patch(
            f"/editor/api/images/{image_id}",
            json={"card_number": " 042 ", "tags": {"rarity": [tag_id]}},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["invalidated_galleries"] == [g1_id]
        assert body["image"]["card_number"] == "042"
        assert body["image"]["taxonomies"]["rarity"] == [{"id": tag_id, "name": "Ultra Rare", "slug": "ultra-rare"}]

        after = client.get(f"/gallery-quest/v1/images/{g1_id}", params={"rarity": "ultra-rare"}).json()
        assert [item["id"] for item in after["items"]] == [image_id]
        assert after["items"][0]["card_number"] == "042"

        resp = client.get(f"/editor/api/galleries/{g2_id}", headers=headers)
        assert resp.json()["version"] == 2

        # Clearing a category and unsetting the card number.
        resp = client.patch(
            f"/editor/api/images/{image_id}", json={"card_number": "", "tags": {"rarity": []}}, headers=headers
        )
        assert resp.status_code == 200
        assert resp.json()["image"]["card_number"] == ""
        assert resp.json()["image"]["taxonomies"]["rarity"] == []

        resp = client.patch(f"/editor/api/images/{image_id}", json={"tags": {"rarity": [other_tag_id]}}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["details"] == {"category": "rarity", "tag_ids": [other_tag_id]}

        resp = client.patch(f"/editor/api/images/{image_id}", json={"tags": {"series": [1]}}, headers=headers)
        assert resp.status_code == 400

        resp = client.patch("/editor/api/images/9999", json={"title": "x"}, headers=headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "not_found"

        resp = client.post("/editor/api/images", json={"file_path": "../etc/passwd"}, headers=headers)
        assert resp.status_code == 400


def test_editor_cache_purge_expired(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_purge")
    headers = _headers()

    async def _seed_cache() -> None:
        async with app.state.engine.begin() as conn:
            await conn.exec_driver_sql(
                "INSERT INTO cache_entries (key, value_json, expires_at) VALUES ('old', '{}', 1.0), ('new', '{}', 9e12)"
            )
        await app.state.engine.dispose()

    asyncio.run(_seed_cache())

    with TestClient(app) as client:
        resp = client.post("/editor/api/maintenance/cache/purge-expired", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["deleted"] == 1

        resp = client.post("/editor/api/maintenance/cache/purge-expired", headers=headers)
        assert resp.json()["deleted"] == 0

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi.testclient import TestClient

from gallery_quest.core.security import create_jwt
from gallery_quest.db.models.base import Base
from gallery_quest.db.models.images import Image
from gallery_quest.db.models.posts import Post
from gallery_quest.db.session import create_sessionmaker
from gallery_quest.db.versions import VersionStore
from gallery_quest.main import create_app


def _create_app(tmp_path: Path, monkeypatch, name: str):
    db_url = "sqlite+aiosqlite:///" + (tmp_path / f"{name}.db").as_posix()
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("SECRET_KEY", "secret_test")
    monkeypatch.setenv("EDITOR_USERNAME", "editor")

    app = create_app()

    async def _seed() -> None:
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        Session = create_sessionmaker(app.state.engine)
        async with Session() as session:
            session.add_all([Image(title=f"Card {i}", file_path=f"c{i}.png") for i in range(1, 5)])
            await session.commit()
        await app.state.engine.dispose()

    asyncio.run(_seed())
    return app


def _headers() -> dict[str, str]:
    token = create_jwt(secret_key="secret_test", subject="editor", ttl_s=3600)
    return {"Authorization": f"Bearer {token}"}


def test_editor_gallery_lifecycle_bumps_version(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_galleries")
    headers = _headers()

    with TestClient(app) as client:
        resp = client.post(
            "/editor/api/galleries",
            json={"title": " Starter Set ", "image_ids": [3, 1, 3, -1, 0]},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        gallery_id = body["gallery"]["id"]
        assert body["gallery"] == {"id": gallery_id, "title": "Starter Set", "image_ids": [3, 1]}
        assert body["version"] == 2

        public = client.get(f"/gallery-quest/v1/images/{gallery_id}").json()
        assert [item["id"] for item in public["items"]] == [3, 1]

        resp = client.put(f"/editor/api/galleries/{gallery_id}/images", json={"image_ids": [4, 2]}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["gallery"]["image_ids"] == [4, 2]
        assert resp.json()["version"] == 3

        public = client.get(f"/gallery-quest/v1/images/{gallery_id}").json()
        assert [item["id"] for item in public["items"]] == [4, 2]

        resp = client.get(f"/editor/api/galleries/{gallery_id}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["gallery"]["image_ids"] == [4, 2]
        assert resp.json()["version"] == 3

        resp = client.delete(f"/editor/api/galleries/{gallery_id}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["version"] == 4

        resp = client.get(f"/gallery-quest/v1/images/{gallery_id}")
        assert resp.status_code == 404
        assert resp.json()["code"] == "gallery_not_found"

        resp = client.delete(f"/editor/api/galleries/{gallery_id}", headers=headers)
        assert resp.status_code == 404


def test_editor_gallery_update_rejects_bad_input(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_galleries_bad")
    headers = _headers()

    async def _add_page() -> None:
        Session = create_sessionmaker(app.state.engine)
        async with Session() as session:
            session.add(Post(post_type="page", title="About"))
            await session.commit()
        await app.state.engine.dispose()

    asyncio.run(_add_page())

    with TestClient(app) as client:
        resp = client.put("/editor/api/galleries/1/images", json={"image_ids": [1]}, headers=headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "gallery_not_found"

        resp = client.put("/editor/api/galleries/1/images", json={"image_ids": ["x"]}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "bad_request"

        resp = client.put("/editor/api/galleries/1/images", json={}, headers=headers)
        assert resp.status_code == 400

        resp = client.get("/editor/api/galleries/0", headers=headers)
        assert resp.status_code == 400


def test_failed_version_bump_rolls_back_image_list(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch, "editor_bump_rollback")
    headers = _headers()

    async def _broken_increment(self, gallery_id: int, *, session=None) -> int:
        raise RuntimeError("version store down")

    with TestClient(app, raise_server_exceptions=False) as client:
        created = client.post("/editor/api/galleries", json={"image_ids": [1, 2]}, headers=headers).json()
        gallery_id = created["gallery"]["id"]
        assert client.get(f"/gallery-quest/v1/images/{gallery_id}").json()["total"] == 2

        monkeypatch.setattr(VersionStore, "atomic_increment", _broken_increment)
        resp = client.put(
            f"/editor/api/galleries/{gallery_id}/images",
            json={"image_ids": [1, 2, 3, 4]},
            headers=headers,
        )
        assert resp.status_code == 500
        assert resp.json()["code"] == "api_error"

        stored = client.get(f"/editor/api/galleries/{gallery_id}", headers=headers).json()
        assert stored["gallery"]["image_ids"] == [1, 2]
        assert stored["version"] == 2
        assert client.get(f"/gallery-quest/v1/images/{gallery_id}").json()["total"] == 2

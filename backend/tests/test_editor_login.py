from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi.testclient import TestClient

from gallery_quest.core.security import create_jwt, decode_jwt
from gallery_quest.db.models.base import Base
from gallery_quest.main import create_app


def _create_app(tmp_path: Path, monkeypatch):
    db_url = "sqlite+aiosqlite:///" + (tmp_path / "editor_login.db").as_posix()
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("SECRET_KEY", "secret_test")
    monkeypatch.setenv("EDITOR_USERNAME", "editor")
    monkeypatch.setenv("EDITOR_PASSWORD", "pw_test")

    app = create_app()

    async def _migrate() -> None:
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await app.state.engine.dispose()

    asyncio.run(_migrate())
    return app


def test_editor_login_issues_token(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch)

    with TestClient(app) as client:
        resp = client.post("/editor/api/login", json={"username": "editor", "password": "pw_test"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert decode_jwt(body["token"], secret_key="secret_test")["sub"] == "editor"

        resp = client.get(
            "/editor/api/galleries/1", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == "gallery_not_found"


def test_editor_login_rejects_bad_credentials(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch)

    with TestClient(app) as client:
        resp = client.post("/editor/api/login", json={"username": "editor", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthorized"

        resp = client.post("/editor/api/login", json={"username": "editor"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "bad_request"

        resp = client.post("/editor/api/login", content=b"not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400


def test_editor_endpoints_require_token(tmp_path: Path, monkeypatch) -> None:
    app = _create_app(tmp_path, monkeypatch)
    other = create_jwt(secret_key="secret_test", subject="intruder", ttl_s=3600)

    with TestClient(app) as client:
        resp = client.post("/editor/api/galleries", json={"title": "x"}, headers={"X-Request-Id": "req_auth"})
        assert resp.status_code == 401
        body = resp.json()
        assert body["ok"] is False
        assert body["code"] == "unauthorized"
        assert body["request_id"] == "req_auth"

        resp = client.post("/editor/api/galleries", json={"title": "x"}, headers={"Authorization": f"Bearer {other}"})
        assert resp.status_code == 403
        assert resp.json()["code"] == "forbidden"

        resp = client.get("/metrics")
        assert resp.status_code == 401

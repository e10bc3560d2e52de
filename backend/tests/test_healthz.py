from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from gallery_quest.main import create_app


def test_healthz_ok(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "healthz.db"
    db_url = "sqlite+aiosqlite:///" + db_path.as_posix()

    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", db_url)

    app = create_app()

    with TestClient(app) as client:
        resp = client.get("/healthz", headers={"X-Request-Id": "req_health"})
        assert resp.status_code == 200
        body = resp.json()
        assert body == {"ok": True, "db_ok": True, "request_id": "req_health"}
        assert resp.headers["X-Request-Id"] == "req_health"

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from fastapi.testclient import TestClient

from gallery_quest.core.security import create_jwt
from gallery_quest.db.models.base import Base
from gallery_quest.main import create_app


def test_metrics_exposes_gallery_metrics(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "metrics.db"
    db_url = "sqlite+aiosqlite:///" + db_path.as_posix()

    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("SECRET_KEY", "secret_test")
    monkeypatch.setenv("EDITOR_USERNAME", "editor")

    app = create_app()

    async def _migrate() -> None:
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await app.state.engine.dispose()

    asyncio.run(_migrate())

    token = create_jwt(secret_key="secret_test", subject="editor", ttl_s=3600)
    with TestClient(app) as client:
        resp = client.get("/metrics", headers={"X-Request-Id": "req_test"})
        assert resp.status_code == 401
        assert resp.json()["request_id"] == "req_test"

        client.get("/gallery-quest/v1/images/42")

        resp = client.get("/metrics", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

        text = resp.text
        assert "gallery_quest_images_requests_total" in text
        assert "gallery_quest_images_latency_seconds" in text
        assert "gallery_quest_images_cache_total" in text
        assert "gallery_quest_gallery_invalidations_total" in text
        m = re.search(r'gallery_quest_images_requests_total\{result="not_found"\}\s+(\d+(\.\d+)?)', text)
        assert m is not None
        assert float(m.group(1)) >= 1

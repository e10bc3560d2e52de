from __future__ import annotations

from typing import Any

from fastapi import Request

from gallery_quest.core.security import require_editor


def get_editor_claims(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    return require_editor(
        request.headers,
        secret_key=settings.secret_key,
        editor_username=settings.editor_username,
    )

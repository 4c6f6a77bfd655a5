"""Exportación JSON de usuarios.

Por qué JSON:
- Permite inspeccionar o cachear fuera del build lo que vería un template.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from core.domain.models import UserRecord


def users_to_json(users: Sequence[UserRecord]) -> str:
    """Serializa con los nombres camelCase (`firstName`, `smallPhotoUrl`...)."""

    payload = [u.model_dump(mode="json", by_alias=True) for u in users]
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def export_users_json(*, users: Sequence[UserRecord], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(users_to_json(users), encoding="utf-8")
    return output_path

from __future__ import annotations

import json
import random
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from .config import get_settings


_NON_ALNUM_PATTERN = re.compile(r'[^A-Za-z0-9]')


def exports_root(output_dir: Path | None = None) -> Path:
    root = output_dir if output_dir is not None else get_settings().output_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


def events_path(output_dir: Path | None = None) -> Path:
    return exports_root(output_dir) / 'events.jsonl'


def sanitize_client_name(client_name: str | None) -> str:
    token = str(client_name or '').strip()
    if not token:
        return 'Client'
    return _NON_ALNUM_PATTERN.sub('_', token)


def new_report_id(prefix: str, *, today: date | None = None, rng: random.Random | None = None) -> str:
    year = (today or date.today()).year
    number = (rng or random).randint(0, 9999)
    return f'{prefix}-{year}-{number:04d}'


def report_filename(prefix: str, client_name: str | None, on_date: date, report_id: str) -> str:
    safe_prefix = _NON_ALNUM_PATTERN.sub('_', prefix.strip()) or 'Report'
    return f'{safe_prefix}_{sanitize_client_name(client_name)}_{on_date.isoformat()}_{report_id}.pdf'


def write_bytes_atomic(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(payload)
    tmp.replace(path)


def append_event(event: str, *, output_dir: Path | None = None, **extra: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    row = {
        'ts': now,
        'event': event,
        **extra,
    }
    events_file = events_path(output_dir)
    with events_file.open('a', encoding='utf-8') as f:
        f.write(json.dumps(row, ensure_ascii=False) + '\n')

"""SQLite job store: one row per analysis, pointing at its report files."""

import json
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from .config import settings


BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = Path(settings.data_dir) if settings.data_dir else BASE_DIR / 'data'
REPORTS_DIR = DATA_DIR / 'reports'
DB_PATH = DATA_DIR / 'verifier.db'

QUEUED = 'queued'
RUNNING = 'running'
FINISHED = 'finished'
FAILED = 'failed'
STATUSES = (QUEUED, RUNNING, FINISHED, FAILED)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS analyses (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    status TEXT NOT NULL,
    file_id TEXT NOT NULL,
    config_json TEXT NOT NULL,
    report_json_path TEXT,
    report_html_path TEXT,
    error_message TEXT
)
"""

# Columns a job may change after it is created.
_MUTABLE_COLUMNS = frozenset({'status', 'error_message', 'report_json_path', 'report_html_path'})

_SECRET_KEYS = frozenset({'figma_token'})


def ensure_dirs() -> None:
    """Ensure data directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    REPORTS_DIR.mkdir(exist_ok=True)


def get_connection() -> sqlite3.Connection:
    """Get a DB connection with dict-like rows."""
    ensure_dirs()
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _execute(sql: str, params: tuple = ()) -> list[dict]:
    """Run one statement in its own transaction and return any rows."""
    with closing(get_connection()) as conn, conn:
        return [dict(r) for r in conn.execute(sql, params).fetchall()]


def init_db() -> None:
    """Initialize DB schema."""
    _execute(_SCHEMA)


def redact_config(config: dict) -> dict:
    """Copy of an analysis config without credentials."""
    return {k: v for k, v in config.items() if k not in _SECRET_KEYS}


def create_analysis(file_id: str, config: dict) -> str:
    """Insert a queued analysis and return its ID. Credentials are never stored."""
    analysis_id = str(uuid4())
    _execute(
        'INSERT INTO analyses (id, created_at, status, file_id, config_json) VALUES (?, ?, ?, ?, ?)',
        (
            analysis_id,
            datetime.now(timezone.utc).isoformat(),
            QUEUED,
            file_id,
            json.dumps(redact_config(config)),
        ),
    )
    return analysis_id


def _update(analysis_id: str, **columns) -> None:
    unknown = set(columns) - _MUTABLE_COLUMNS
    if unknown:
        raise ValueError(f'Cannot update columns: {", ".join(sorted(unknown))}')
    assignments = ', '.join(f'{name} = ?' for name in columns)
    _execute(f'UPDATE analyses SET {assignments} WHERE id = ?', (*columns.values(), analysis_id))


def update_status(analysis_id: str, status: str, error_message: str = '') -> None:
    """Move a job to ``status``; unknown statuses are rejected."""
    if status not in STATUSES:
        raise ValueError(f'Unknown status: {status}')
    _update(analysis_id, status=status, error_message=error_message)


def attach_results(analysis_id: str, report_json_path: str, report_html_path: str) -> None:
    """Record where the JSON and HTML reports were written."""
    _update(analysis_id, report_json_path=report_json_path, report_html_path=report_html_path)


def get_analysis(analysis_id: str) -> dict | None:
    """Fetch a job by ID."""
    rows = _execute('SELECT * FROM analyses WHERE id = ?', (analysis_id,))
    return rows[0] if rows else None


def list_analyses(limit: int = 50, status: str | None = None) -> list[dict]:
    """List recent jobs, newest first, optionally only those in ``status``."""
    if status is None:
        return _execute('SELECT * FROM analyses ORDER BY created_at DESC LIMIT ?', (limit,))
    return _execute(
        'SELECT * FROM analyses WHERE status = ? ORDER BY created_at DESC LIMIT ?',
        (status, limit),
    )

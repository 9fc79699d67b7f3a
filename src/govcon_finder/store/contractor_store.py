"""Store for contractor records; the source of NAICS codes to query."""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ._db import SqliteDatabase


@dataclass
class Contractor:
    """A known contractor and its primary NAICS code."""

    id: int
    name: str
    naics_code: Optional[str]
    created_at: datetime


class ContractorStore:
    """SQLite store for contractors."""

    def __init__(self, db_path: str | Path = "govcon_finder.db"):
        self._db = SqliteDatabase(db_path)

    def add(self, name: str, naics_code: Optional[str]) -> Contractor:
        """Add a contractor. naics_code may be empty; such rows are ignored for discovery."""
        now = datetime.now(timezone.utc)
        code = (naics_code or "").strip() or None
        with self._db.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO contractors (name, naics_code, created_at) VALUES (?, ?, ?)",
                (name, code, now.isoformat()),
            )
            row_id = cursor.lastrowid or 0
        return Contractor(id=row_id, name=name, naics_code=code, created_at=now)

    def list_all(self) -> list[Contractor]:
        with self._db.connection() as conn:
            rows = conn.execute("SELECT * FROM contractors ORDER BY id").fetchall()
        return [
            Contractor(
                id=r["id"],
                name=r["name"],
                naics_code=r["naics_code"],
                created_at=datetime.fromisoformat(r["created_at"]),
            )
            for r in rows
        ]

    def distinct_codes(self) -> list[str]:
        """Distinct non-empty NAICS codes on file, in first-added order."""
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT naics_code FROM contractors
                WHERE naics_code IS NOT NULL AND naics_code != ''
                GROUP BY naics_code
                ORDER BY MIN(id)
                """
            ).fetchall()
        return [r["naics_code"] for r in rows]

"""SQLite-backed opportunity cache with expiry cleanup and a sync log."""

import logging
import sqlite3
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from govcon_finder.models.opportunity import Opportunity, SyncLogEntry

from ._db import SqliteDatabase

logger = logging.getLogger(__name__)

MAX_QUERY_LIMIT = 500


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally (pair with ESCAPE '\\')."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class OpportunityCache:
    """
    Persisted cache of normalized opportunities keyed by notice id.

    Upserts update the mutable fields only; classification code, solicitation
    number, type, posted date and url keep their first-seen values. Rows are
    deleted once their deadline passes, whether or not a cycle touched them.
    The newest sync-log row is the only freshness signal.
    """

    def __init__(self, db_path: str | Path = "govcon_finder.db"):
        self._db = SqliteDatabase(db_path)

    def _connection(self):
        return self._db.connection()

    def _row_to_opp(self, row: sqlite3.Row) -> Opportunity:
        return Opportunity(
            id=row["id"],
            title=row["title"],
            agency=row["agency"] or "",
            classification_code=row["naics_code"] or "",
            posted_date=row["posted_date"] or "",
            response_deadline=row["response_deadline"] or "",
            deadline_timestamp=row["deadline_ts"],
            display_value=row["value"] or "TBD",
            numeric_value=row["numeric_value"] or 0.0,
            type=row["type"] or "",
            set_aside=row["set_aside"] or None,
            description=row["description"] or "",
            solicitation_number=row["solicitation_number"] or "",
            url=row["url"] or "",
        )

    def upsert_many(self, opportunities: Iterable[Opportunity], now: Optional[datetime] = None) -> int:
        """Insert new ids, update existing ones. Returns rows written."""
        stamp = (now or datetime.now(timezone.utc)).isoformat()
        rows = [
            (
                o.id, o.title, o.agency, o.classification_code or None, o.posted_date or None,
                o.response_deadline or None, o.deadline_timestamp, o.display_value, o.numeric_value,
                o.type, o.set_aside, o.description, o.solicitation_number, o.url, stamp, stamp,
            )
            for o in opportunities
        ]
        if not rows:
            return 0
        with self._connection() as conn:
            conn.executemany(
                """
                INSERT INTO cached_opportunities
                    (id, title, agency, naics_code, posted_date, response_deadline, deadline_ts,
                     value, numeric_value, type, set_aside, description, solicitation_number, url,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET
                    title = excluded.title,
                    agency = excluded.agency,
                    response_deadline = excluded.response_deadline,
                    deadline_ts = excluded.deadline_ts,
                    value = excluded.value,
                    numeric_value = excluded.numeric_value,
                    set_aside = excluded.set_aside,
                    description = excluded.description,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
        return len(rows)

    def upsert(self, opp: Opportunity, now: Optional[datetime] = None) -> None:
        self.upsert_many([opp], now)

    def purge_expired(self, now: datetime) -> int:
        """Delete every row whose deadline has passed. Returns rows deleted."""
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM cached_opportunities WHERE deadline_ts <= ?",
                (_epoch_ms(now),),
            )
            return cursor.rowcount

    def record_sync(self, now: datetime, count: int, codes: Sequence[str]) -> SyncLogEntry:
        """Append a sync-log entry."""
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO opportunity_sync_log (synced_at, count, naics_list) VALUES (?, ?, ?)",
                (now.astimezone(timezone.utc).isoformat(), count, ",".join(codes)),
            )
        return SyncLogEntry(synced_at=now, count=count, codes=list(codes))

    def write_cycle(self, opportunities: Sequence[Opportunity], codes: Sequence[str], now: datetime) -> SyncLogEntry:
        """Upsert the cycle's opportunities, purge expired rows, log the sync."""
        written = self.upsert_many(opportunities, now)
        purged = self.purge_expired(now)
        entry = self.record_sync(now, written, codes)
        logger.info("Wrote %d to cache, purged %d expired", written, purged)
        return entry

    def last_sync(self) -> Optional[SyncLogEntry]:
        """Most recent sync-log entry, or None."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM opportunity_sync_log ORDER BY synced_at DESC, id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        synced_at = datetime.fromisoformat(row["synced_at"])
        if synced_at.tzinfo is None:
            synced_at = synced_at.replace(tzinfo=timezone.utc)
        codes = [c for c in (row["naics_list"] or "").split(",") if c]
        return SyncLogEntry(synced_at=synced_at, count=row["count"], codes=codes)

    def read_live(self, now: datetime, limit: int = MAX_QUERY_LIMIT) -> list[Opportunity]:
        """Rows with a future deadline, soonest deadline first, capped at `limit`."""
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM cached_opportunities
                WHERE deadline_ts > ?
                ORDER BY deadline_ts ASC
                LIMIT ?
                """,
                (_epoch_ms(now), limit),
            ).fetchall()
        return [self._row_to_opp(r) for r in rows]

    def query(
        self,
        *,
        now: datetime,
        code_prefix: str = "",
        search: str = "",
        notice_type: str = "",
        active_only: bool = True,
        limit: int = 200,
    ) -> tuple[list[Opportunity], int]:
        """
        Read-only browse of the cache. Returns (page, total matching).
        Search covers title, agency, code, and solicitation number.
        """
        clauses: list[str] = []
        params: list = []
        if active_only:
            clauses.append("deadline_ts > ?")
            params.append(_epoch_ms(now))
        if code_prefix:
            clauses.append(r"naics_code LIKE ? || '%' ESCAPE '\'")
            params.append(_escape_like(code_prefix))
        if notice_type:
            clauses.append(r"LOWER(type) LIKE '%' || LOWER(?) || '%' ESCAPE '\'")
            params.append(_escape_like(notice_type))
        if search:
            clauses.append(
                r"(LOWER(title) LIKE '%' || LOWER(?) || '%' ESCAPE '\'"
                r" OR LOWER(agency) LIKE '%' || LOWER(?) || '%' ESCAPE '\'"
                r" OR naics_code LIKE '%' || ? || '%' ESCAPE '\'"
                r" OR solicitation_number LIKE '%' || ? || '%' ESCAPE '\')"
            )
            params.extend([_escape_like(search)] * 4)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page_size = max(0, min(limit, MAX_QUERY_LIMIT))

        with self._connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM cached_opportunities {where}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM cached_opportunities {where} ORDER BY deadline_ts ASC LIMIT ?",
                [*params, page_size],
            ).fetchall()
        return [self._row_to_opp(r) for r in rows], total

    def get(self, opp_id: str) -> Optional[Opportunity]:
        """Get single opportunity by id."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM cached_opportunities WHERE id = ?", (opp_id,)).fetchone()
        return self._row_to_opp(row) if row else None

    def count(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM cached_opportunities").fetchone()[0]

"""Persistence of knowledge-gap records as issues or inquiries."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import GapPersistError
from ..core.models import GapRecord, GapType
from ..web.models import Inquiry, Issue

logger = logging.getLogger(__name__)

TITLE_PREFIX = "Knowledge Gap: "
TITLE_MAX_QUERY_CHARS = 27
TITLE_TRUNCATE_AT = 24
GAP_TAGS = ("ai-gap", "needs-review", "auto-detected")


def build_gap_title(query: str) -> str:
    """Title for a gap record; the query part never exceeds 27 characters."""
    if len(query) > TITLE_MAX_QUERY_CHARS:
        return f"{TITLE_PREFIX}{query[:TITLE_TRUNCATE_AT]}..."
    return f"{TITLE_PREFIX}{query}"


class GapRecorder:
    """Abstract base class for gap persistence."""

    def record(self, gap_type: GapType, query: str, project_id: str, user_id: str) -> Optional[GapRecord]:
        """Persist one gap. Returns None when persistence failed."""
        raise NotImplementedError


class SqlGapRecorder(GapRecorder):
    """Writes gaps to the issues/inquiries tables.

    Best effort: a failed write is logged and reported as None, never raised,
    so the chat answer is still returned.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    @staticmethod
    def _write(db: Session, row, gap_type: GapType) -> None:
        try:
            db.add(row)
            db.commit()
            db.refresh(row)
        except Exception as e:
            try:
                db.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after failed {gap_type.value} write also failed: {rollback_error}")
            raise GapPersistError(f"Error creating {gap_type.value}: {e}") from e

    def record(self, gap_type: GapType, query: str, project_id: str, user_id: str) -> Optional[GapRecord]:
        title = build_gap_title(query)
        tags = list(GAP_TAGS)

        try:
            db = self.session_factory()
        except Exception as e:
            logger.error(f"Knowledge gap not logged, no database session: {e}")
            return None

        try:
            if gap_type == GapType.ISSUE:
                row = Issue(
                    title=title,
                    description=query,
                    severity="medium",
                    status="open",
                    tags=tags,
                    project_id=project_id,
                    user_id=user_id,
                )
            else:
                row = Inquiry(
                    title=title,
                    description=query,
                    content=query,
                    tags=tags,
                    project_id=project_id,
                    user_id=user_id,
                )
            self._write(db, row, gap_type)
            logger.info(f"Created {gap_type.value} {row.id} for knowledge gap in project {project_id}")
            return GapRecord(
                id=row.id,
                gap_type=gap_type,
                title=title,
                description=query,
                tags=tags,
                project_id=project_id,
                user_id=user_id,
                severity=getattr(row, "severity", None),
                status=getattr(row, "status", None),
            )
        except GapPersistError as e:
            logger.error(f"Knowledge gap not logged: {e}")
            return None
        finally:
            db.close()

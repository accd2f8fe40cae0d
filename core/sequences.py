"""Sequential document numbers such as ``JOB-2025-001`` and ``INV-2025-014``.

Numbers come from a per-(type, year) counter row that is incremented with a
single ``UPDATE ... RETURNING`` inside the caller's transaction, so two
concurrent creations can never read the same "last" number. The counter is
committed (or rolled back) together with the row that consumes the number.
"""
from datetime import date, datetime
from typing import Optional
import logging

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import Base

logger = logging.getLogger(__name__)

DOCUMENT_PREFIXES = {
    "job": "JOB",
    "invoice": "INV",
}
SEQUENCE_WIDTH = 3


class DocumentSequence(Base):
    __tablename__ = "document_sequences"
    __table_args__ = (
        UniqueConstraint("doc_type", "year", name="uq_document_sequences_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    doc_type = Column(String(20), nullable=False)
    year = Column(Integer, nullable=False)
    last_value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def format_document_number(prefix: str, year: int, value: int) -> str:
    """Zero-pad to three digits; wider values keep all their digits."""
    return f"{prefix}-{year}-{value:0{SEQUENCE_WIDTH}d}"


def parse_sequence_value(document_number: str) -> Optional[int]:
    """Numeric suffix of a document number, or None if it is malformed."""
    suffix = document_number.rsplit("-", 1)[-1]
    return int(suffix) if suffix.isdigit() else None


class DocumentNumberAllocator:
    def __init__(self, db: Session):
        self.db = db

    def allocate(self, doc_type: str, number_column, year: Optional[int] = None) -> str:
        """Reserve the next number for ``doc_type`` in ``year``.

        ``number_column`` is the mapped column holding issued numbers (for
        example ``Job.job_number``); it is only scanned the first time a
        (type, year) counter is needed, so numbers issued before the counter
        existed are never handed out again.
        """
        if doc_type not in DOCUMENT_PREFIXES:
            raise ValueError(f"Unknown document type: {doc_type}")
        prefix = DOCUMENT_PREFIXES[doc_type]
        year = year or date.today().year

        value = self._increment(doc_type, year)
        if value is None:
            value = self._create_counter(doc_type, year, prefix, number_column)

        number = format_document_number(prefix, year, value)
        logger.debug(f"Allocated document number {number}")
        return number

    def _increment(self, doc_type: str, year: int) -> Optional[int]:
        stmt = (
            update(DocumentSequence)
            .where(DocumentSequence.doc_type == doc_type, DocumentSequence.year == year)
            .values(last_value=DocumentSequence.last_value + 1)
            .returning(DocumentSequence.last_value)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def _highest_issued(self, prefix: str, year: int, number_column) -> int:
        rows = self.db.query(number_column).filter(
            number_column.like(f"{prefix}-{year}-%")
        ).all()
        values = [parse_sequence_value(row[0]) for row in rows if row[0]]
        return max((v for v in values if v is not None), default=0)

    def _create_counter(self, doc_type: str, year: int, prefix: str, number_column) -> int:
        value = self._highest_issued(prefix, year, number_column) + 1
        try:
            with self.db.begin_nested():
                self.db.add(DocumentSequence(doc_type=doc_type, year=year, last_value=value))
        except IntegrityError:
            # Another transaction created the counter first; take the next value from it
            logger.info(f"Counter for {doc_type}/{year} created concurrently, retrying increment")
            value = self._increment(doc_type, year)
            if value is None:
                raise
        else:
            logger.info(f"Started {prefix} numbering for {year} at {value}")
        return value

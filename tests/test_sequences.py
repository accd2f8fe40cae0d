import pytest

from apps.companies.models import Company
from apps.invoices.models import Invoice
from apps.jobs.models import Job
from core.sequences import (
    DocumentNumberAllocator, DocumentSequence, format_document_number, parse_sequence_value
)


def _add_job(db, company, number):
    db.add(Job(job_number=number, company_id=company.id, description="Imported"))


@pytest.fixture
def acme(db_session):
    company = Company(name="Acme Pumps")
    db_session.add(company)
    db_session.commit()
    return company


def test_format_pads_to_three_digits():
    assert format_document_number("JOB", 2025, 7) == "JOB-2025-007"
    assert format_document_number("INV", 2025, 1000) == "INV-2025-1000"


def test_parse_sequence_value():
    assert parse_sequence_value("JOB-2025-014") == 14
    assert parse_sequence_value("JOB-2025-1000") == 1000
    assert parse_sequence_value("JOB-2025-X1") is None


def test_first_number_of_year_is_001(db_session):
    allocator = DocumentNumberAllocator(db_session)
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-001"
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-002"


def test_numbering_restarts_each_year(db_session):
    allocator = DocumentNumberAllocator(db_session)
    allocator.allocate("job", Job.job_number, 2025)
    allocator.allocate("job", Job.job_number, 2025)
    assert allocator.allocate("job", Job.job_number, 2026) == "JOB-2026-001"
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-003"


def test_job_and_invoice_sequences_are_independent(db_session):
    allocator = DocumentNumberAllocator(db_session)
    allocator.allocate("job", Job.job_number, 2025)
    allocator.allocate("job", Job.job_number, 2025)
    assert allocator.allocate("invoice", Invoice.invoice_number, 2025) == "INV-2025-001"


def test_numbers_grow_past_999(db_session):
    db_session.add(DocumentSequence(doc_type="job", year=2025, last_value=998))
    db_session.commit()

    allocator = DocumentNumberAllocator(db_session)
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-999"
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-1000"
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-1001"


def test_counter_is_seeded_from_numeric_maximum(db_session, acme):
    _add_job(db_session, acme, "JOB-2025-999")
    _add_job(db_session, acme, "JOB-2025-1000")
    _add_job(db_session, acme, "JOB-2024-1500")
    db_session.commit()

    allocator = DocumentNumberAllocator(db_session)
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-1001"


def test_rolled_back_number_is_reissued(db_session):
    allocator = DocumentNumberAllocator(db_session)
    allocator.allocate("job", Job.job_number, 2025)
    db_session.commit()

    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-002"
    db_session.rollback()
    assert allocator.allocate("job", Job.job_number, 2025) == "JOB-2025-002"


def test_unknown_document_type(db_session):
    with pytest.raises(ValueError):
        DocumentNumberAllocator(db_session).allocate("quote", Job.job_number, 2025)


def test_counter_seeded_by_another_session_is_reused(db_session, session_factory):
    first = DocumentNumberAllocator(db_session)
    assert first.allocate("invoice", Invoice.invoice_number, 2025) == "INV-2025-001"
    db_session.commit()

    # A second writer that missed the counter row tries to seed it as well
    other = session_factory()
    try:
        value = DocumentNumberAllocator(other)._create_counter(
            "invoice", 2025, "INV", Invoice.invoice_number
        )
        assert value == 2
        other.commit()
    finally:
        other.close()

    assert first.allocate("invoice", Invoice.invoice_number, 2025) == "INV-2025-003"

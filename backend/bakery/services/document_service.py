# Overview: Document code allocation (sale codes) inside the caller's transaction.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import DocumentSequence

SALE_DOCUMENT_TYPE = "SALE"
SALE_CODE_PREFIX = "V"

SEEDED_DOCUMENT_TYPES = (SALE_DOCUMENT_TYPE,)


def seed_sequences(document_types=SEEDED_DOCUMENT_TYPES) -> list[str]:
    """
    Insert missing sequence rows starting at 1 and commit.

    With the row present, allocation is always the single UPDATE below and
    concurrent first sales never race on the unique document_type insert.
    Returns the types that were created; existing counters are left alone.
    """
    existing = {
        row.document_type
        for row in db.session.query(DocumentSequence.document_type)
        .filter(DocumentSequence.document_type.in_(document_types))
        .all()
    }
    created = [t for t in document_types if t not in existing]
    for document_type in created:
        db.session.add(DocumentSequence(document_type=document_type, next_number=1))
    db.session.commit()
    return created


def next_document_number(*, document_type: str, prefix: str, pad: int = 6) -> str:
    """
    Allocate the next document code for a type, e.g. "V-000042".

    Runs inside the caller's transaction and does not commit: a rolled-back
    sale gives its number back, so codes have no gaps from failed sales.
    The increment is a single UPDATE so two writers cannot read the same
    counter value. An unseeded type gets its row on first use.
    """
    stmt = (
        update(DocumentSequence)
        .where(DocumentSequence.document_type == document_type)
        .values(next_number=DocumentSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        current = (
            db.session.query(DocumentSequence.next_number)
            .filter_by(document_type=document_type)
            .scalar()
        )
        number = current - 1
    else:
        db.session.add(DocumentSequence(document_type=document_type, next_number=2))
        db.session.flush()
        number = 1

    return f"{prefix}-{number:0{pad}d}"

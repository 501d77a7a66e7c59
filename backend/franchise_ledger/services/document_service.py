# Overview: Per-unit document numbering for revenue and expense entries.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def next_document_number(
    *,
    unit_id: int,
    document_type: str,
    prefix: str,
    pad: int = 4,
) -> str:
    """
    Allocate the next document number for a unit/type inside the caller's transaction.

    The increment is a single UPDATE so concurrent writers serialize on the
    sequence row. Does not commit: the number is released with the rollback
    if the surrounding write fails.
    """
    if not unit_id:
        raise DocumentSequenceError("unit_id is required")
    if not document_type:
        raise DocumentSequenceError("document_type is required")

    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.unit_id == unit_id,
            DocumentSequence.document_type == document_type,
        )
        .values(next_number=DocumentSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        current = (
            db.session.query(DocumentSequence.next_number)
            .filter_by(unit_id=unit_id, document_type=document_type)
            .scalar()
        )
        next_num = current - 1
    else:
        seq = DocumentSequence(unit_id=unit_id, document_type=document_type, next_number=2)
        try:
            with db.session.begin_nested():
                db.session.add(seq)
            next_num = 1
        except IntegrityError:
            # Another writer created the row first; fall back to incrementing it.
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise DocumentSequenceError("Unable to allocate document number")
            current = (
                db.session.query(DocumentSequence.next_number)
                .filter_by(unit_id=unit_id, document_type=document_type)
                .scalar()
            )
            next_num = current - 1

    return f"{prefix}-{next_num:0{pad}d}"

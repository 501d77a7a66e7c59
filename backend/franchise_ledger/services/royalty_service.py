# Overview: Royalty phase calculator; trailing window of royalty totals for trend charts.

from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..models import Royalty
from .catalog_service import get_unit


def royalty_snapshot(unit_id: int, *, phases: int = 4) -> dict:
    """
    Most recent `phases` royalty totals in chronological order, left-padded with 0.

    current_amount is the latest period's total (0 when the unit has none).
    """
    get_unit(unit_id)
    recent = (
        db.session.query(Royalty.total_amount)
        .filter(Royalty.unit_id == unit_id)
        .order_by(Royalty.period_start_date.desc(), Royalty.id.desc())
        .limit(phases)
        .all()
    )
    amounts = [Decimal(str(row.total_amount)) for row in recent]
    current_amount = amounts[0] if amounts else Decimal("0")

    series = list(reversed(amounts))
    series = [Decimal("0")] * (phases - len(series)) + series
    return {"current_amount": current_amount, "phase_series": series}

from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date


class Royalty(db.Model):
    """
    Royalty owed by a unit for one period.

    Generated and settled elsewhere; the ledger only reads total_amount to
    chart the trailing trend.
    """
    __tablename__ = "royalties"
    __table_args__ = (
        db.Index("ix_royalties_unit_period", "unit_id", "period_start_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True, index=True)

    period_year = db.Column(db.Integer, nullable=False)
    period_month = db.Column(db.Integer, nullable=False)
    period_start_date = db.Column(db.Date, nullable=False)
    period_end_date = db.Column(db.Date, nullable=False)

    gross_revenue = db.Column(db.Numeric(12, 2), nullable=False)
    royalty_percentage = db.Column(db.Numeric(5, 2), nullable=False)
    royalty_amount = db.Column(db.Numeric(12, 2), nullable=False)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="draft")
    due_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "unit_id": self.unit_id,
            "period_year": self.period_year,
            "period_month": self.period_month,
            "period_start_date": to_iso_date(self.period_start_date),
            "period_end_date": to_iso_date(self.period_end_date),
            "gross_revenue": self.gross_revenue,
            "royalty_percentage": self.royalty_percentage,
            "royalty_amount": self.royalty_amount,
            "total_amount": self.total_amount,
            "status": self.status,
            "due_date": to_iso_date(self.due_date),
        }

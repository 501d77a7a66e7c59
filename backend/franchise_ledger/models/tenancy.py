from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Franchise(db.Model):
    """
    Multi-tenant root: every brand is a Franchise.

    Products are catalogued per franchise and shared by all of its units.
    Franchise CRUD lives outside this package; rows here are read-only
    reference data for the ledger.
    """
    __tablename__ = "franchises"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), nullable=True, unique=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Franchise id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Unit(db.Model):
    """
    A single franchise location with its own inventory and ledger.

    MULTI-TENANT: Units are scoped to franchises via franchise_id.
    """
    __tablename__ = "units"
    __table_args__ = (
        db.UniqueConstraint("franchise_id", "code", name="uq_units_franchise_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    franchise = db.relationship("Franchise", backref=db.backref("units", lazy=True))

    def __repr__(self) -> str:
        return f"<Unit id={self.id} name={self.name!r} franchise_id={self.franchise_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "name": self.name,
            "code": self.code,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class DocumentSequence(db.Model):
    """
    Atomic per-unit document sequences (revenue and expense numbers).
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("unit_id", "document_type", name="uq_doc_sequences_unit_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=False, index=True)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "document_type": self.document_type,
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }

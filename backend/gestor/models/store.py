from __future__ import annotations

from ..extensions import db


class StoreEntry(db.Model):
    """
    One addressable blob of the keyed store.

    payload is the canonical JSON text of a whole collection; the unit of
    update is the entire collection, never a single record.
    """
    __tablename__ = "store_entries"

    key = db.Column(db.String(128), primary_key=True)
    payload = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<StoreEntry key={self.key!r} bytes={len(self.payload or '')}>"

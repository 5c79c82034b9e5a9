from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class StorageEntry(db.Model):
    """
    One named collection of the local key-value store.

    The value is the full JSON snapshot of the collection; every mutation
    rewrites it whole (last write wins).
    """
    __tablename__ = "storage_entries"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<StorageEntry key={self.key!r} size={len(self.value or '')}>"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "size": len(self.value or ""),
            "updated_at": to_utc_z(self.updated_at),
        }

"""
Device persistence: a scoped string key-value capability.

Stores only ever talk to a ``KeyValueStorage``; the Flask app wires in the
database-backed implementation and tests may use the in-memory one.
"""

from __future__ import annotations

from typing import Optional


class KeyValueStorage:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: dict | None = None):
        self._values = dict(initial or {})

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = value

    def delete(self, key):
        self._values.pop(key, None)

    def keys(self):
        return list(self._values)


class DatabaseStorage(KeyValueStorage):
    """Key-value rows in the ``device_value`` table, one row per key."""

    def __init__(self, db):
        self.db = db

    def get(self, key):
        from .models import DeviceValue
        row = DeviceValue.query.filter_by(key=key).first()
        return row.value if row else None

    def set(self, key, value):
        from .models import DeviceValue
        row = DeviceValue.query.filter_by(key=key).first()
        if row:
            row.value = value
        else:
            self.db.session.add(DeviceValue(key=key, value=value))
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

    def delete(self, key):
        from .models import DeviceValue
        DeviceValue.query.filter_by(key=key).delete()
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

    def keys(self):
        from .models import DeviceValue
        return [row.key for row in DeviceValue.query.order_by(DeviceValue.key).all()]

"""Key/value string stores used as the save storage medium."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from hivemind.errors import StorageQuotaError

logger = logging.getLogger(__name__)


def _entry_size(key, value):
    return len(key.encode('utf-8')) + len(value.encode('utf-8'))


class KeyValueStore:
    """Interface for a bounded key/value string store."""

    capacity = 0

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError

    def remove(self, key):
        raise NotImplementedError

    def keys(self):
        raise NotImplementedError

    def used_bytes(self):
        raise NotImplementedError

    def _check_quota(self, key, value):
        """Raise StorageQuotaError if writing key would exceed capacity."""
        current = self.get(key)
        used = self.used_bytes()
        if current is not None:
            used -= _entry_size(key, current)
        needed = used + _entry_size(key, value)
        if needed > self.capacity:
            raise StorageQuotaError(
                f"Storage quota exceeded writing {key}: {needed} > {self.capacity} bytes"
            )


class MemoryStore(KeyValueStore):
    """In-process store, for tests and headless runs."""

    def __init__(self, capacity):
        self.capacity = capacity
        self._data = {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._check_quota(key, value)
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)

    def used_bytes(self):
        return sum(_entry_size(k, v) for k, v in self._data.items())


class DatabaseStore(KeyValueStore):
    """Store backed by the storage_entries table. Needs an app context."""

    def __init__(self, db, capacity):
        self.db = db
        self.capacity = capacity

    def _entry(self, key):
        from hivemind.models import StorageEntry
        return self.db.session.get(StorageEntry, key)

    def get(self, key):
        entry = self._entry(key)
        return entry.value if entry is not None else None

    def set(self, key, value):
        from hivemind.models import StorageEntry
        self._check_quota(key, value)
        entry = self._entry(key)
        if entry is None:
            self.db.session.add(StorageEntry(key=key, value=value))
        else:
            entry.value = value
        self._commit(f"write {key}")

    def remove(self, key):
        entry = self._entry(key)
        if entry is not None:
            self.db.session.delete(entry)
            self._commit(f"remove {key}")

    def keys(self):
        from hivemind.models import StorageEntry
        return [row.key for row in StorageEntry.query.with_entities(StorageEntry.key).all()]

    def used_bytes(self):
        from hivemind.models import StorageEntry
        return sum(entry.size() for entry in StorageEntry.query.all())

    def _commit(self, action):
        try:
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error("Storage %s failed: %s", action, e)
            raise StorageQuotaError(f"Storage rejected {action}: {e}") from e

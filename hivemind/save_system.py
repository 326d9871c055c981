"""Save slot management: save, load, rename, delete, export/import and migration.

Records are stored as JSON strings in a key/value store, one key per slot
(``SAVE_KEY_PREFIX + id``), plus an index key listing slot summaries most
recent first. Writes go record first, then index; removals go index
first, then record, so the index never points at a missing record.
"""
import base64
import binascii
import copy
import json
import logging
import math
import uuid
from datetime import datetime

from hivemind.config import Config
from hivemind.errors import CorruptDataError, MigrationError, NotFoundError, StorageQuotaError

logger = logging.getLogger(__name__)

STATE_SECTIONS = ('resources', 'units', 'evolution', 'settings')


def _identity_migration(record):
    return record


# Major format version -> transform producing a current-schema record
MIGRATIONS = {
    1: _identity_migration,
}


def _major_version(version):
    try:
        return int(str(version).split('.')[0])
    except ValueError:
        return None


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_state(state):
    """Raise CorruptDataError unless state has the persisted game state shape."""
    if not isinstance(state, dict):
        raise CorruptDataError("Save state must be an object")

    for section in STATE_SECTIONS:
        if not isinstance(state.get(section), dict):
            raise CorruptDataError(f"Save state has missing or invalid section: {section}")

    for section in ('resources', 'units'):
        for key, value in state[section].items():
            if not _is_number(value) or value < 0:
                raise CorruptDataError(f"Save state has invalid {section} entry: {key}")

    evolution = state['evolution']
    if not _is_number(evolution.get('points', 0)) or not isinstance(evolution.get('bonuses', {}), dict):
        raise CorruptDataError("Save state has invalid evolution section")

    settings = state['settings']
    speed = settings.get('gameSpeed', Config.DEFAULT_GAME_SPEED)
    if not _is_number(speed) or speed <= 0:
        raise CorruptDataError("Save state has invalid game speed")
    for field in ('lastSaved', 'totalPlaytime'):
        value = settings.get(field, 0)
        if not _is_number(value) or value < 0:
            raise CorruptDataError(f"Save state has invalid settings entry: {field}")


def validate_record(record):
    """Raise CorruptDataError unless record has the persisted slot shape."""
    if not isinstance(record, dict):
        raise CorruptDataError("Save record must be an object")

    for field, check in (('id', lambda v: isinstance(v, str) and v),
                         ('name', lambda v: isinstance(v, str)),
                         ('timestamp', _is_number),
                         ('formatVersion', lambda v: isinstance(v, str) and v),
                         ('playTimeMs', _is_number),
                         ('state', lambda v: isinstance(v, dict))):
        if field not in record or not check(record[field]):
            raise CorruptDataError(f"Save record has missing or invalid field: {field}")

    validate_state(record['state'])


def _format_timestamp(timestamp_ms):
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime('%Y-%m-%d %H:%M:%S')


def slot_summary(record):
    """Index entry for a slot (everything except the embedded state)."""
    return {key: record[key] for key in ('id', 'name', 'timestamp', 'formatVersion', 'playTimeMs')}


class SaveSystem:
    """Owns the slot index and per-slot records in a key/value store."""

    def __init__(self, store, clock, max_slots=None, format_version=None):
        """Initialize the save system."""
        self.store = store
        self.clock = clock
        self.max_slots = max_slots or Config.MAX_SAVE_SLOTS
        self.format_version = format_version or Config.SAVE_FORMAT_VERSION
        self.key_prefix = Config.SAVE_KEY_PREFIX
        self.slots_key = Config.SAVE_SLOTS_KEY
        self.current_state_key = Config.CURRENT_STATE_KEY

    # --------- index ---------

    def get_save_slots(self):
        """Slot summaries, most recent first. A corrupt index reads as empty."""
        slots_data = self.store.get(self.slots_key)
        if not slots_data:
            return []
        try:
            slots = json.loads(slots_data)
            if not isinstance(slots, list):
                raise ValueError("slot index is not a list")
            return sorted(slots, key=lambda slot: slot['timestamp'], reverse=True)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load save slots: %s", e)
            return []

    def _write_index(self, slots):
        self.store.set(self.slots_key, json.dumps(slots))

    def _record_key(self, save_id):
        return self.key_prefix + save_id

    def _read_record(self, save_id):
        data = self.store.get(self._record_key(save_id))
        if data is None:
            raise NotFoundError(save_id)
        try:
            record = json.loads(data)
        except ValueError as e:
            raise CorruptDataError(f"Save {save_id} is not valid JSON: {e}") from e
        if not isinstance(record, dict) or not isinstance(record.get('formatVersion'), str):
            raise CorruptDataError(f"Save {save_id} has no format version")
        return record

    def _insert_slot(self, record):
        """Write a record and add it to the index, evicting the oldest slots."""
        record_key = self._record_key(record['id'])
        self.store.set(record_key, json.dumps(record))

        slots = sorted([slot_summary(record)] + self.get_save_slots(),
                       key=lambda slot: slot['timestamp'], reverse=True)
        evicted = slots[self.max_slots:]
        slots = slots[:self.max_slots]

        try:
            self._write_index(slots)
        except StorageQuotaError:
            # Index unchanged; drop the orphaned record
            self.store.remove(record_key)
            raise

        for slot in evicted:
            logger.info("Evicting save slot %s (%s)", slot['id'], slot['name'])
            self.store.remove(self._record_key(slot['id']))

        return record

    def _new_id(self, prefix, timestamp):
        return f"{prefix}-{timestamp}-{uuid.uuid4().hex[:8]}"

    # --------- slot operations ---------

    def save(self, state, name=None):
        """Create a new save slot for a state snapshot and return it."""
        timestamp = self.clock()
        record = {
            'id': self._new_id('save', timestamp),
            'name': name or f"Auto Save {_format_timestamp(timestamp)}",
            'timestamp': timestamp,
            'formatVersion': self.format_version,
            'playTimeMs': state.get('settings', {}).get('totalPlaytime', 0),
            'state': copy.deepcopy(state)
        }
        validate_record(record)
        return self._insert_slot(record)

    def load(self, save_id):
        """Return the state snapshot embedded in a save slot."""
        record = self._read_record(save_id)
        if record['formatVersion'] != self.format_version:
            logger.warning("Save version mismatch for %s (%s), attempting migration",
                           save_id, record['formatVersion'])
            record = self.migrate_save(record['formatVersion'], record)
        validate_record(record)
        return record['state']

    def migrate_save(self, old_version, record):
        """Transform a record from an older format version to the current one.

        The stored record is not rewritten.
        """
        migration = MIGRATIONS.get(_major_version(old_version))
        if migration is None:
            raise MigrationError(old_version, self.format_version)
        logger.info("Migrating save from version %s to %s", old_version, self.format_version)
        migrated = migration(copy.deepcopy(record))
        migrated['formatVersion'] = self.format_version
        return migrated

    def rename(self, save_id, new_name):
        """Rename a save slot."""
        record = self._read_record(save_id)
        record['name'] = new_name
        self.store.set(self._record_key(save_id), json.dumps(record))

        slots = [
            {**slot, 'name': new_name} if slot['id'] == save_id else slot
            for slot in self.get_save_slots()
        ]
        self._write_index(slots)
        return slot_summary(record)

    def delete(self, save_id):
        """Delete a save slot and its record."""
        slots = self.get_save_slots()
        remaining = [slot for slot in slots if slot['id'] != save_id]
        record_key = self._record_key(save_id)
        if len(remaining) == len(slots) and self.store.get(record_key) is None:
            raise NotFoundError(save_id)

        self._write_index(remaining)
        self.store.remove(record_key)
        return True

    def export(self, save_id):
        """Encode a full save record as a portable base64 token."""
        record = self._read_record(save_id)
        return base64.b64encode(json.dumps(record).encode('utf-8')).decode('ascii')

    def import_save(self, token, name=None):
        """Decode an exported token into a new save slot with a fresh id."""
        if not isinstance(token, str) or not token.strip():
            raise CorruptDataError("Import token is empty")
        try:
            record = json.loads(base64.b64decode(token.strip(), validate=True).decode('utf-8'))
        except (binascii.Error, ValueError) as e:
            raise CorruptDataError(f"Import token could not be decoded: {e}") from e
        validate_record(record)

        timestamp = self.clock()
        imported = {
            **record,
            'id': self._new_id('import', timestamp),
            'name': name or f"Imported: {record['name']}",
            'timestamp': timestamp
        }
        return self._insert_slot(imported)

    # --------- conveniences ---------

    def quick_save(self, state):
        return self.save(state, f"Quick Save {_format_timestamp(self.clock())}")

    def get_quick_save(self):
        """Most recent quick save summary, or None."""
        return next((slot for slot in self.get_save_slots() if slot['name'].startswith('Quick Save')), None)

    def clear_all(self):
        """Remove every save slot and the index."""
        self.store.remove(self.slots_key)
        for key in self.store.keys():
            if key.startswith(self.key_prefix) and key != self.slots_key:
                self.store.remove(key)
        return True

    def get_storage_usage(self):
        used = self.store.used_bytes()
        available = self.store.capacity
        percentage = (used / available) * 100 if available else 0
        return {'used': used, 'available': available, 'percentage': percentage}

    @staticmethod
    def get_save_metadata(state):
        """Display summary for a state snapshot."""
        points = state['evolution']['points']
        return {
            'hiveName': 'The Hive',
            'level': math.floor(points / 100) + 1,
            'totalUnits': sum(state['units'].values()),
            'evolutionPoints': points
        }

    # --------- current game ---------

    def persist_current(self, state):
        """Write the live game state so a restarted process can resume it."""
        payload = {'formatVersion': self.format_version, 'state': state}
        self.store.set(self.current_state_key, json.dumps(payload))

    def restore_current(self):
        """Read the live game state, or None if absent or unreadable."""
        data = self.store.get(self.current_state_key)
        if data is None:
            return None
        try:
            payload = json.loads(data)
            state = payload['state']
            version = payload['formatVersion']
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Stored game state is corrupt, starting fresh: %s", e)
            return None

        if version != self.format_version:
            try:
                state = self.migrate_save(version, {'state': state})['state']
            except MigrationError as e:
                logger.error("Stored game state cannot be restored, starting fresh: %s", e)
                return None
        try:
            validate_state(state)
        except CorruptDataError as e:
            logger.error("Stored game state has an invalid shape, starting fresh: %s", e)
            return None
        return state

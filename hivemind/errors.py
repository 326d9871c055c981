"""Error taxonomy for the simulation and the save system."""


class HiveMindError(Exception):
    """Base class for all game errors."""
    reason = 'error'


class InsufficientResourcesError(HiveMindError):
    """A cost cannot be paid from the current balance."""
    reason = 'insufficient_resources'

    def __init__(self, shortfall):
        self.shortfall = dict(shortfall)
        missing = ', '.join(f"{name} (short {amount:g})" for name, amount in self.shortfall.items())
        super().__init__(f"Insufficient resources: {missing}")


class LockedError(HiveMindError):
    """An unlock predicate is not yet satisfied."""
    reason = 'locked'


class PersistenceError(HiveMindError):
    """Base class for save system failures."""
    reason = 'persistence'


class NotFoundError(PersistenceError):
    """No record exists for a save id."""
    reason = 'not_found'

    def __init__(self, save_id):
        self.save_id = save_id
        super().__init__(f"Save not found: {save_id}")


class CorruptDataError(PersistenceError):
    """A stored or imported record does not have a valid shape."""
    reason = 'corrupt_data'


class MigrationError(PersistenceError):
    """No migration path exists from a record's format version."""
    reason = 'migration'

    def __init__(self, from_version, to_version):
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(f"No migration path from save version {from_version} to {to_version}")


class StorageQuotaError(PersistenceError):
    """The storage medium rejected a write."""
    reason = 'storage_quota'

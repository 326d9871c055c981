"""Simulation context: the single owner of the live game.

All commands from the presentation layer go through a SimulationContext.
It serializes mutations, runs the offline catch-up once at start-up,
drives live ticks, and turns save system errors into CommandResults.
Readers subscribe for state snapshots and never mutate state directly.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass

from hivemind.config import Config
from hivemind.errors import HiveMindError, InsufficientResourcesError, LockedError
from hivemind.game_engine import GameEngine
from hivemind.notifications import NotificationCenter
from hivemind.save_system import slot_summary

logger = logging.getLogger(__name__)


def wall_clock_ms():
    return int(time.time() * 1000)


@dataclass
class CommandResult:
    success: bool
    value: object = None
    reason: str = None
    message: str = None

    def to_dict(self):
        return {
            'success': self.success,
            'value': self.value,
            'reason': self.reason,
            'message': self.message
        }


class SimulationContext:
    """Owns the engine, save system and notifications for one game."""

    def __init__(self, save_system, clock=None, engine_config=None):
        self.save_system = save_system
        self.clock = clock or wall_clock_ms
        self.engine_config = engine_config or {}
        self.notifications = NotificationCenter(self.clock)
        self.engine = self._new_engine()
        self.is_running = False
        self.started_up = False
        self.tick_interval_ms = Config.TICK_INTERVAL_MS
        self._last_tick_ms = None
        self._subscribers = []
        self._lock = threading.RLock()

    def _new_engine(self):
        return GameEngine({**self.engine_config, 'now_ms': self.clock()})

    # --------- subscriptions ---------

    def subscribe(self, callback):
        """Register a callback receiving a snapshot after every change.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _publish(self):
        snapshot = self.get_snapshot()
        for callback in list(self._subscribers):
            callback(snapshot)

    def get_snapshot(self):
        """Read-only view of the game for display."""
        with self._lock:
            self.notifications.sweep()
            snapshot = self.engine.get_snapshot()
            snapshot['is_running'] = self.is_running
            snapshot['notifications'] = self.notifications.to_list()
            snapshot['metadata'] = self.save_system.get_save_metadata(snapshot)
            return snapshot

    # --------- lifecycle ---------

    def start_up(self):
        """Restore the persisted game, apply offline catch-up and start ticking.

        Runs once per process; later calls are no-ops.
        """
        with self._lock:
            if self.started_up:
                return
            self.started_up = True

            state = self.save_system.restore_current()
            if state is not None:
                self.engine = GameEngine.load_from_state(state, self.engine_config)
                logger.info("Restored game state (last saved %s)", self.engine.settings.last_saved_ms)
            self.run_offline_catch_up()
            self.start()

    def run_offline_catch_up(self, now_ms=None):
        """Apply offline production since the last save, then stamp and persist."""
        with self._lock:
            if now_ms is None:
                now_ms = self.clock()
            report = self.engine.offline_tick(now_ms, self.engine.settings.last_saved_ms)
            if report is not None:
                self.notifications.notify(
                    'success',
                    'Welcome Back!',
                    f"You were away for {math.floor(report['hours'] + 0.5)}h and gained resources!",
                    Config.OFFLINE_NOTIFICATION_DURATION_MS
                )
            self.auto_save(now_ms)
            return report

    def start(self):
        with self._lock:
            if not self.is_running:
                self.is_running = True
                self._last_tick_ms = self.clock()
                logger.info("Simulation started")
            self._publish()
            return CommandResult(True)

    def pause(self):
        with self._lock:
            if self.is_running:
                self.catch_up()
                self.is_running = False
                logger.info("Simulation paused")
            self._publish()
            return CommandResult(True)

    def reset(self):
        """Discard progress and return to the initial state, stopped."""
        with self._lock:
            self.engine = self._new_engine()
            self.is_running = False
            self._last_tick_ms = None
            self.notifications.clear()
            logger.info("Simulation reset")
            self.auto_save()
            self._publish()
            return CommandResult(True)

    # --------- ticking ---------

    def tick(self, now_ms=None):
        """Apply one live tick for the time since the previous one."""
        with self._lock:
            if not self.is_running:
                return False
            if now_ms is None:
                now_ms = self.clock()
            elapsed_ms = max(0, now_ms - self._last_tick_ms)
            self._last_tick_ms = now_ms
            self.engine.live_tick(elapsed_ms, self.engine.settings.game_speed)
            self.notifications.sweep(now_ms)
            if now_ms - self.engine.settings.last_saved_ms >= Config.AUTO_SAVE_INTERVAL_MS:
                self.auto_save(now_ms)
            self._publish()
            return True

    def catch_up(self, now_ms=None):
        """Tick if at least one interval has passed since the last tick."""
        with self._lock:
            if not self.is_running:
                return False
            if now_ms is None:
                now_ms = self.clock()
            if now_ms - self._last_tick_ms < self.tick_interval_ms:
                return False
            return self.tick(now_ms)

    def auto_save(self, now_ms=None):
        """Stamp the last-saved time and persist the live state."""
        with self._lock:
            if now_ms is None:
                now_ms = self.clock()
            state = self.engine.get_state()
            state['settings']['lastSaved'] = now_ms
            try:
                self.save_system.persist_current(state)
            except HiveMindError as e:
                logger.error("Auto save failed: %s", e)
                return False
            self.engine.mark_saved(now_ms)
            return True

    # --------- commands ---------

    def _run(self, action, operation):
        """Run a command, converting game errors into a failed CommandResult."""
        with self._lock:
            try:
                value = operation()
            except HiveMindError as e:
                logger.warning("%s failed: %s", action, e)
                if e.reason not in ('insufficient_resources', 'locked'):
                    self.notifications.notify('error', f"{action} failed", str(e))
                return CommandResult(False, reason=e.reason, message=str(e))
            except ValueError as e:
                logger.warning("%s rejected: %s", action, e)
                return CommandResult(False, reason='invalid', message=str(e))
            self._publish()
            return CommandResult(True, value=value)

    def set_speed(self, multiplier):
        def operation():
            if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)) or multiplier <= 0:
                raise ValueError(f"Game speed must be a positive number, got {multiplier!r}")
            self.catch_up()
            self.engine.settings.game_speed = float(multiplier)
            return self.engine.settings.game_speed
        return self._run('Set speed', operation)

    def purchase_unit(self, unit_id):
        def operation():
            if self.engine.data_loader.get_unit(unit_id) is None:
                raise ValueError(f"Unit type not found: {unit_id}")
            self.catch_up()
            if not self.engine.is_unit_available(unit_id):
                raise LockedError(f"{unit_id} is locked")
            cost = self.engine.get_unit_cost(unit_id)
            if not self.engine.purchase_unit(unit_id):
                raise InsufficientResourcesError({
                    kind: amount - self.engine.resources.get(kind)
                    for kind, amount in cost.items()
                    if self.engine.resources.get(kind) < amount
                })
            return {'unit': unit_id, 'count': self.engine.units.get(unit_id), 'cost': cost}
        return self._run('Purchase unit', operation)

    def purchase_bonus(self, flag):
        def operation():
            bonus = self.engine.data_loader.get_bonus(flag)
            if bonus is None:
                raise ValueError(f"Evolution bonus not found: {flag}")
            if self.engine.evolution.is_unlocked(flag):
                raise ValueError(f"{bonus['name']} is already purchased")
            self.catch_up()
            if not self.engine.is_bonus_available(flag):
                raise LockedError(f"{bonus['name']} is locked")
            if not self.engine.purchase_bonus(flag):
                raise InsufficientResourcesError(
                    {'evolution_points': bonus['cost'] - self.engine.evolution.points})
            self.notifications.notify(
                'success',
                'Evolution Unlocked!',
                f"{bonus['name']}: {bonus['description']}",
                Config.BONUS_NOTIFICATION_DURATION_MS
            )
            return {'bonus': flag, 'points': self.engine.evolution.points}
        return self._run('Purchase bonus', operation)

    def save(self, name=None):
        def operation():
            self.catch_up()
            now_ms = self.clock()
            state = self.engine.get_state()
            state['settings']['lastSaved'] = now_ms
            slot = self.save_system.save(state, name)
            self.engine.mark_saved(now_ms)
            # The slot exists now; a failed live-state write is only logged
            self.auto_save(now_ms)
            self.notifications.notify('success', 'Game Saved', f"Saved as {slot['name']}")
            return slot_summary(slot)
        return self._run('Save', operation)

    def quick_save(self):
        def operation():
            self.catch_up()
            now_ms = self.clock()
            state = self.engine.get_state()
            state['settings']['lastSaved'] = now_ms
            slot = self.save_system.quick_save(state)
            self.engine.mark_saved(now_ms)
            self.auto_save(now_ms)
            return slot_summary(slot)
        return self._run('Quick save', operation)

    def load(self, save_id):
        def operation():
            state = self.save_system.load(save_id)
            self.engine = GameEngine.load_from_state(state, self.engine_config)
            now_ms = self.clock()
            self._last_tick_ms = now_ms
            self.auto_save(now_ms)
            self.notifications.notify('success', 'Game Loaded', f"Loaded save {save_id}")
            return self.engine.get_state()
        return self._run('Load', operation)

    def delete(self, save_id):
        return self._run('Delete', lambda: self.save_system.delete(save_id))

    def rename(self, save_id, new_name):
        def operation():
            if not isinstance(new_name, str) or not new_name.strip():
                raise ValueError("Save name must be a non-empty string")
            return self.save_system.rename(save_id, new_name.strip())
        return self._run('Rename', operation)

    def export(self, save_id):
        return self._run('Export', lambda: self.save_system.export(save_id))

    def import_save(self, token, name=None):
        def operation():
            slot = self.save_system.import_save(token, name)
            return slot_summary(slot)
        return self._run('Import', operation)

    def list_saves(self):
        with self._lock:
            return self.save_system.get_save_slots()

    def get_quick_save(self):
        """Most recent quick save slot summary, or None."""
        with self._lock:
            return self.save_system.get_quick_save()

    def dismiss_notification(self, notification_id):
        with self._lock:
            if not self.notifications.dismiss(notification_id):
                return CommandResult(False, reason='not_found',
                                     message=f"Notification not found: {notification_id}")
            self._publish()
            return CommandResult(True, value=notification_id)

    def clear_saves(self):
        return self._run('Clear saves', self.save_system.clear_all)

    def storage_usage(self):
        with self._lock:
            return self.save_system.get_storage_usage()

    def get_catalog(self):
        with self._lock:
            return self.engine.get_catalog()

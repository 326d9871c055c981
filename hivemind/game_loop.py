"""Fixed-cadence scheduler driving live ticks."""
import logging
import time

from hivemind.config import Config

logger = logging.getLogger(__name__)

class GameLoop:
    """Calls SimulationContext.tick() every interval_ms of wall-clock time.

    Cooperative and single-threaded: run() blocks, sleeping between ticks,
    until stop() is called or max_ticks ticks have been attempted.
    """

    def __init__(self, context, interval_ms=None, sleep=time.sleep):
        self.context = context
        self.interval_ms = interval_ms or Config.TICK_INTERVAL_MS
        self.sleep = sleep
        self._stopped = False

    def stop(self):
        self._stopped = True

    def run(self, max_ticks=None):
        """Run until stopped. Returns the number of cadence steps taken."""
        self._stopped = False
        self.context.start_up()
        clock = self.context.clock
        next_due = clock() + self.interval_ms
        steps = 0

        logger.info("Game loop running every %dms", self.interval_ms)
        while not self._stopped and (max_ticks is None or steps < max_ticks):
            now = clock()
            if now < next_due:
                self.sleep((next_due - now) / 1000)
                continue

            self.context.tick(now)
            steps += 1
            next_due += self.interval_ms
            if next_due <= now:
                # Fell behind (suspended process); resume cadence from now
                next_due = now + self.interval_ms

        self.context.auto_save()
        logger.info("Game loop stopped after %d ticks", steps)
        return steps

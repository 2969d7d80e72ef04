"""
Cancelable one-shot timers driven from the main update loop.
"""
import itertools
import logging

log = logging.getLogger(__name__)


class Scheduler:
    """
    Keyed one-shot tasks polled by run_due().

    At most one task exists per key; scheduling under an existing key
    replaces it. Time comes from a ClockHAL so tests can use a virtual
    clock.
    """

    def __init__(self, clock):
        """
        Args:
            clock: ClockHAL implementation
        """
        self.clock = clock
        self._tasks = {}  # key -> (deadline_ms, seq, callback)
        self._seq = itertools.count()

    def call_later(self, key, delay_ms, callback):
        """Run callback() once delay_ms has elapsed, replacing any task under key."""
        deadline = self.clock.ticks_ms() + delay_ms
        self._tasks[key] = (deadline, next(self._seq), callback)

    def cancel(self, key):
        """Cancel a pending task. Returns True if one was pending."""
        return self._tasks.pop(key, None) is not None

    def is_pending(self, key):
        return key in self._tasks

    def pending_keys(self):
        return list(self._tasks.keys())

    def clear(self):
        self._tasks.clear()

    def run_due(self):
        """
        Fire every task whose deadline has passed, earliest first.

        Returns:
            Number of tasks fired
        """
        now = self.clock.ticks_ms()
        due = sorted(
            (deadline, seq, key)
            for key, (deadline, seq, _) in self._tasks.items()
            if deadline <= now
        )
        fired = 0
        for _, seq, key in due:
            task = self._tasks.get(key)
            # Cancelled or rescheduled by an earlier callback
            if task is None or task[1] != seq:
                continue
            del self._tasks[key]
            log.debug("timer %r fired", key)
            task[2]()
            fired += 1
        return fired

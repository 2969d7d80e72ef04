"""
Modifier key state machine.

Quality and transposition modifiers form two independent exclusivity
groups. Releasing a key does not clear its modifier immediately: a short
decay lets the player move between keys for a compound quality (minor
then dominant -> minor seventh) without audible chatter.
"""
import logging

from .chord_engine import ChordQuality
from .constants import Modifier, Music, Timing
from .errors import InvalidConfigError

log = logging.getLogger(__name__)

# Tie-break order when several modifiers are active; first match wins
QUALITY_RESOLUTION = [
    ((Modifier.MINOR, Modifier.DOMINANT), ChordQuality.MINOR_SEVENTH),
    ((Modifier.MINOR, Modifier.MAJOR_SIXTH), ChordQuality.MINOR_SIXTH),
    ((Modifier.DOMINANT,), ChordQuality.DOMINANT_SEVENTH),
    ((Modifier.MINOR,), ChordQuality.MINOR),
    ((Modifier.DIMINISHED,), ChordQuality.DIMINISHED_SEVENTH),
    ((Modifier.MAJOR_SIXTH,), ChordQuality.MAJOR_SIXTH),
    ((Modifier.AUGMENTED,), ChordQuality.AUGMENTED_SEVENTH),
    ((Modifier.MAJOR_SEVENTH,), ChordQuality.MAJOR_SEVENTH),
    ((Modifier.HALF_DIMINISHED,), ChordQuality.HALF_DIMINISHED_SEVENTH),
    ((Modifier.MINOR_SEVENTH,), ChordQuality.MINOR_SEVENTH),
    ((Modifier.MINOR_SIX,), ChordQuality.MINOR_SIXTH),
    ((Modifier.MAJOR,), ChordQuality.MAJOR),
]

TRANSPOSITION_RESOLUTION = [
    (Modifier.ROOT_SHIFT_DOWN, Music.SEMITONE_DOWN),
    (Modifier.ROOT_SHIFT_UP, Music.SEMITONE_UP),
]


def resolve_quality(active):
    """
    Map a set of active modifier names to one ChordQuality (or None).
    """
    for required, quality in QUALITY_RESOLUTION:
        if all(name in active for name in required):
            return quality
    return None


def resolve_transposition(active):
    """Root shift interval for the active modifiers, or None."""
    for name, interval in TRANSPOSITION_RESOLUTION:
        if name in active:
            return interval
    return None


class ModifierState:
    """
    Tracks which modifiers are active and which keys are physically held.
    """

    def __init__(self, scheduler, on_change=None, decay_ms=Timing.MODIFIER_DECAY_MS):
        """
        Args:
            scheduler: Scheduler used for the release decay
            on_change: Called with no arguments after an activation or decay
            decay_ms: Delay before a released modifier is cleared
        """
        self.scheduler = scheduler
        self.on_change = on_change
        self.decay_ms = decay_ms
        self._active = dict((name, False) for name in Modifier.ALL)
        self._held = set()

    @staticmethod
    def _timer_key(name):
        return ("modifier_decay", name)

    def _check_name(self, name):
        if name not in self._active:
            raise InvalidConfigError("Unknown modifier: %r" % (name,))

    def is_active(self, name):
        self._check_name(name)
        return self._active[name]

    def active_names(self):
        """Active modifiers in declaration order."""
        return [name for name in Modifier.ALL if self._active[name]]

    @property
    def held(self):
        """Modifiers whose keys are physically down."""
        return frozenset(self._held)

    def set_modifier(self, name, active):
        """
        Press (active=True) or release (active=False) a modifier.
        """
        self._check_name(name)
        if active:
            self._activate(name)
        else:
            self._release(name)

    def _activate(self, name):
        self._active[name] = True
        self._held.add(name)

        is_transposition = name in Modifier.TRANSPOSITION
        for other in Modifier.ALL:
            if other == name:
                continue
            if (other in Modifier.TRANSPOSITION) != is_transposition:
                continue
            if frozenset((name, other)) in Modifier.COMPOUNDS:
                continue
            self._active[other] = False

        # Any press ends pending decays so a modifier released mid-transition survives
        for other in Modifier.ALL:
            self.scheduler.cancel(self._timer_key(other))

        log.debug("modifier %s on -> %s", name, self.active_names())
        self._notify()

    def _release(self, name):
        self._held.discard(name)
        self.scheduler.call_later(self._timer_key(name), self.decay_ms, lambda: self._decay(name))

    def _decay(self, name):
        if name not in self._held:
            self._active[name] = False
        # Nothing held at all: clear stuck modifiers from overlapping key events
        if not self._held:
            self.clear_all()
        log.debug("modifier %s decayed -> %s", name, self.active_names())
        self._notify()

    def clear_all(self):
        for name in self._active:
            self._active[name] = False

    def reset(self):
        """Forget held keys and pending decays, clearing every modifier."""
        for name in Modifier.ALL:
            self.scheduler.cancel(self._timer_key(name))
        self._held.clear()
        self.clear_all()

    def quality(self):
        return resolve_quality(set(self.active_names()))

    def transposition(self):
        return resolve_transposition(set(self.active_names()))

    def _notify(self):
        if self.on_change is not None:
            self.on_change()

"""
Tonnetz lattice: coordinate math and keyboard input resolution.

Pitch class at (f, t) is 7f + 4t (mod 12): f steps by perfect fifths,
t by major thirds. Each coordinate owns a major and a minor triangle.
"""
import logging
from collections import namedtuple

from .constants import Lattice, Music, Timing
from .music_theory import KEY_ORDER

log = logging.getLogger(__name__)

LatticeCell = namedtuple("LatticeCell", ["f", "t", "root", "major_vertices", "minor_vertices"])

# Playable identity of a triangle
LatticeTriad = namedtuple("LatticeTriad", ["f", "t", "is_minor"])


def tonnetz_chroma(f, t):
    """Chroma (0-11) at lattice coordinate (f, t)."""
    return (7 * f + 4 * t) % Music.NOTES_PER_OCTAVE


def chroma_to_note_name(chroma):
    return KEY_ORDER[chroma % Music.NOTES_PER_OCTAVE]


def major_triangle(f, t):
    return [(f, t), (f, t + 1), (f + 1, t)]


def minor_triangle(f, t):
    return [(f, t), (f - 1, t + 1), (f + 1, t)]


def in_bounds(f, t):
    return Lattice.F_MIN <= f <= Lattice.F_MAX and Lattice.T_MIN <= t <= Lattice.T_MAX


def cell_at(f, t):
    """The board cell at (f, t), or None outside the board."""
    if not in_bounds(f, t):
        return None
    return LatticeCell(
        f, t, chroma_to_note_name(tonnetz_chroma(f, t)), major_triangle(f, t), minor_triangle(f, t)
    )


def lattice_cells():
    """Every board cell, row by row from the lowest t."""
    return [
        cell_at(f, t)
        for t in range(Lattice.T_MIN, Lattice.T_MAX + 1)
        for f in range(Lattice.F_MIN, Lattice.F_MAX + 1)
    ]


def coordinate_for(row, col):
    """Keyboard row index (0-5) and column number (1-8) -> (f, t)."""
    return (col - 1) + Lattice.F_MIN, Lattice.T_MAX - row


def row_index_for_key(key):
    key = key.lower()
    if key in Lattice.ROW_KEYS:
        return Lattice.ROW_KEYS.index(key)
    return None


def col_for_key(key):
    if len(key) == 1 and key.isdigit() and 1 <= int(key) <= Lattice.COL_COUNT:
        return int(key)
    return None


def _remove_last(stack, value):
    for i in range(len(stack) - 1, -1, -1):
        if stack[i] == value:
            del stack[i]
            return


class LatticeKeyboard:
    """
    Held-key stacks, double-press locks and the shift layer.

    The chord is the last-pressed row with the last-pressed column; a
    lock on either axis overrides its stack. Shift held (or locked by a
    double press) selects the major layer, otherwise minor.
    """

    def __init__(self, clock, double_press_ms=Timing.DOUBLE_PRESS_MS):
        """
        Args:
            clock: ClockHAL used for double-press detection
            double_press_ms: Window for a double press to toggle a lock
        """
        self.clock = clock
        self.double_press_ms = double_press_ms
        self.reset()

    def reset(self):
        self.held_rows = []
        self.held_cols = []
        self.locked_row = None
        self.locked_col = None
        self.shift_active = False
        self.shift_locked = False
        self._last_row_down = (None, None)
        self._last_col_down = (None, None)
        self._last_shift_down = None

    def _is_double(self, last, key, now):
        last_key, last_time = last
        return last_key == key and last_time is not None and now - last_time < self.double_press_ms

    def handles(self, key):
        return key == Lattice.SHIFT_KEY or row_index_for_key(key) is not None or col_for_key(key) is not None

    def key_down(self, key):
        """
        Process a key press.

        Returns:
            True if the key belongs to the lattice
        """
        now = self.clock.ticks_ms()
        if key == Lattice.SHIFT_KEY:
            is_double = self._last_shift_down is not None and now - self._last_shift_down < self.double_press_ms
            self._last_shift_down = now
            if is_double:
                self.shift_locked = not self.shift_locked
                self.shift_active = self.shift_locked
                log.debug("shift lock -> %s", self.shift_locked)
            else:
                self.shift_active = True
            return True

        row = row_index_for_key(key)
        if row is not None:
            is_double = self._is_double(self._last_row_down, row, now)
            self._last_row_down = (row, now)
            if is_double:
                self.locked_row = None if self.locked_row == row else row
                log.debug("row lock -> %s", self.locked_row)
            else:
                self.held_rows.append(row)
            return True

        col = col_for_key(key)
        if col is not None:
            is_double = self._is_double(self._last_col_down, col, now)
            self._last_col_down = (col, now)
            if is_double:
                self.locked_col = None if self.locked_col == col else col
                log.debug("column lock -> %s", self.locked_col)
            else:
                self.held_cols.append(col)
            return True

        return False

    def key_up(self, key):
        """
        Process a key release.

        Returns:
            True if the key belongs to the lattice
        """
        if key == Lattice.SHIFT_KEY:
            if not self.shift_locked:
                self.shift_active = False
            return True
        row = row_index_for_key(key)
        if row is not None:
            _remove_last(self.held_rows, row)
            return True
        col = col_for_key(key)
        if col is not None:
            _remove_last(self.held_cols, col)
            return True
        return False

    @property
    def active_row(self):
        if self.locked_row is not None:
            return self.locked_row
        return self.held_rows[-1] if self.held_rows else None

    @property
    def active_col(self):
        if self.locked_col is not None:
            return self.locked_col
        return self.held_cols[-1] if self.held_cols else None

    def active_triad(self):
        """The single triangle to play, or None if an axis is unset."""
        row = self.active_row
        col = self.active_col
        if row is None or col is None:
            return None
        f, t = coordinate_for(row, col)
        return LatticeTriad(f, t, not self.shift_active)

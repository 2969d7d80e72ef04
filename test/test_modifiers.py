"""
Tests for the modifier state machine and its release decay.

Run with: pytest
     or: python test/test_modifiers.py
"""
import sys

sys.path.insert(0, "src/lib")

import pytest

from harmony_machine.chord_engine import ChordQuality
from harmony_machine.constants import Modifier, Timing
from harmony_machine.errors import InvalidConfigError
from harmony_machine.modifiers import ModifierState, resolve_quality, resolve_transposition
from harmony_machine.scheduler import Scheduler

from mock_hal import MockClockHAL, run_test_classes


def make_state():
    clock = MockClockHAL()
    scheduler = Scheduler(clock)
    changes = []
    state = ModifierState(scheduler, on_change=lambda: changes.append(state.active_names()))
    return state, scheduler, clock, changes


def wait(scheduler, clock, ms):
    clock.advance(ms)
    scheduler.run_due()


class TestResolution:
    """Tests for mapping active modifiers to an override."""

    def test_single_qualities(self):
        assert resolve_quality({Modifier.DOMINANT}) == ChordQuality.DOMINANT_SEVENTH
        assert resolve_quality({Modifier.MINOR}) == ChordQuality.MINOR
        assert resolve_quality({Modifier.DIMINISHED}) == ChordQuality.DIMINISHED_SEVENTH
        assert resolve_quality({Modifier.AUGMENTED}) == ChordQuality.AUGMENTED_SEVENTH
        assert resolve_quality({Modifier.HALF_DIMINISHED}) == ChordQuality.HALF_DIMINISHED_SEVENTH
        assert resolve_quality({Modifier.MAJOR}) == ChordQuality.MAJOR
        assert resolve_quality(set()) is None

    def test_compound_qualities(self):
        assert resolve_quality({Modifier.MINOR, Modifier.DOMINANT}) == ChordQuality.MINOR_SEVENTH
        assert resolve_quality({Modifier.MINOR, Modifier.MAJOR_SIXTH}) == ChordQuality.MINOR_SIXTH

    def test_transposition(self):
        assert resolve_transposition({Modifier.ROOT_SHIFT_UP}) == "2m"
        assert resolve_transposition({Modifier.ROOT_SHIFT_DOWN}) == "-2m"
        assert resolve_transposition({Modifier.ROOT_SHIFT_UP, Modifier.ROOT_SHIFT_DOWN}) == "-2m"
        assert resolve_transposition({Modifier.MINOR}) is None


class TestModifierState:
    """Tests for exclusivity, compounds and decay."""

    def test_quality_group_is_exclusive(self):
        state, _, _, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.DIMINISHED, True)
        assert state.active_names() == [Modifier.DIMINISHED]

    def test_compound_pair_coexists(self):
        state, _, _, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.DOMINANT, True)
        assert state.is_active(Modifier.MINOR)
        assert state.is_active(Modifier.DOMINANT)
        assert state.quality() == ChordQuality.MINOR_SEVENTH

    def test_groups_are_independent(self):
        state, _, _, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.ROOT_SHIFT_UP, True)
        assert state.quality() == ChordQuality.MINOR
        assert state.transposition() == "2m"

    def test_last_root_shift_wins(self):
        state, _, _, _ = make_state()
        state.set_modifier(Modifier.ROOT_SHIFT_DOWN, True)
        state.set_modifier(Modifier.ROOT_SHIFT_UP, True)
        assert state.active_names() == [Modifier.ROOT_SHIFT_UP]

    def test_release_decays_after_window(self):
        state, scheduler, clock, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.MINOR, False)
        wait(scheduler, clock, Timing.MODIFIER_DECAY_MS - 1)
        assert state.is_active(Modifier.MINOR)
        wait(scheduler, clock, 1)
        assert not state.is_active(Modifier.MINOR)

    def test_transition_keeps_compound(self):
        """Releasing minor then pressing dominant inside the window gives m7."""
        state, scheduler, clock, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.MINOR, False)
        wait(scheduler, clock, 100)
        state.set_modifier(Modifier.DOMINANT, True)
        wait(scheduler, clock, 200)
        assert state.quality() == ChordQuality.MINOR_SEVENTH

        state.set_modifier(Modifier.DOMINANT, False)
        wait(scheduler, clock, Timing.MODIFIER_DECAY_MS)
        assert state.active_names() == []

    def test_held_modifier_survives_decay(self):
        state, scheduler, clock, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.DOMINANT, True)
        state.set_modifier(Modifier.DOMINANT, False)
        wait(scheduler, clock, Timing.MODIFIER_DECAY_MS)
        assert state.active_names() == [Modifier.MINOR]
        assert state.held == frozenset([Modifier.MINOR])

    def test_notifies_on_press_and_decay(self):
        state, scheduler, clock, changes = make_state()
        state.set_modifier(Modifier.AUGMENTED, True)
        state.set_modifier(Modifier.AUGMENTED, False)
        assert changes == [[Modifier.AUGMENTED]]
        wait(scheduler, clock, Timing.MODIFIER_DECAY_MS)
        assert changes == [[Modifier.AUGMENTED], []]

    def test_reset(self):
        state, scheduler, _, _ = make_state()
        state.set_modifier(Modifier.MINOR, True)
        state.set_modifier(Modifier.MINOR, False)
        state.reset()
        assert state.active_names() == []
        assert scheduler.pending_keys() == []

    def test_unknown_modifier(self):
        state, _, _, _ = make_state()
        with pytest.raises(InvalidConfigError):
            state.set_modifier("sus4", True)


def run_tests():
    return run_test_classes([TestResolution, TestModifierState])


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)

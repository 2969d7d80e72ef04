"""
Unit tests for the Harmony Machine music logic.
These tests run without any hardware as they test pure logic.

Run with: pytest
     or: python test/test_harmony_machine.py
"""
import sys

# Add the src/lib path for imports when run as a script
sys.path.insert(0, "src/lib")

import pytest

from harmony_machine.chord_engine import (
    ChordEngine,
    ChordKind,
    ChordQuality,
    apply_overrides,
    build_scale_chords,
    lattice_chord,
)
from harmony_machine.constants import Layout
from harmony_machine.errors import HarmonyMachineError, InvalidConfigError
from harmony_machine.music_theory import (
    chord_notes,
    detect_chord,
    get_scale_names,
    interval_between,
    note_midi,
    note_name,
    parse_note,
    pitch_class,
    scale_notes,
    simplify,
    transpose,
)
from harmony_machine.scheduler import Scheduler
from harmony_machine.ui_state import Event, UIState

from mock_hal import MockClockHAL, run_test_classes


class TestMusicTheory:
    """Tests for note spelling, intervals and scales."""

    def test_note_names(self):
        """Test MIDI note to name conversion."""
        assert note_name(60) == "C"
        assert note_name(61) == "C#"
        assert note_name(69) == "A"
        assert note_midi("C4") == 60
        assert note_midi("A4") == 69
        assert note_midi("Cb4") == 59

    def test_parse_note(self):
        note = parse_note("F#3")
        assert note.letter == "F"
        assert note.alter == 1
        assert note.octave == 3
        assert note.chroma == 6
        assert parse_note("Eb").octave is None
        assert pitch_class("Bb2") == "Bb"

    def test_invalid_note_raises(self):
        with pytest.raises(InvalidConfigError):
            parse_note("H4")
        with pytest.raises(InvalidConfigError):
            note_midi("C")

    def test_invalid_config_is_value_error(self):
        assert issubclass(InvalidConfigError, ValueError)
        assert issubclass(InvalidConfigError, HarmonyMachineError)

    def test_transpose_keeps_spelling(self):
        assert transpose("C", "2m") == "Db"
        assert transpose("C4", "-2m") == "B3"
        assert transpose("E4", "3M") == "G#4"
        assert transpose("B3", "2m") == "C4"
        assert transpose("F", "-2m") == "E"

    def test_intervals(self):
        assert interval_between("C", "E") == "3M"
        assert interval_between("D", "F") == "3m"
        assert interval_between("B", "F") == "5d"
        assert interval_between("C", "G") == "5P"

    def test_simplify(self):
        assert simplify("Bbb3") == "A3"
        assert simplify("Cb4") == "B3"
        assert simplify("E#4") == "F4"
        assert simplify("F##") == "G"
        assert simplify("F#4") == "F#4"
        assert simplify("Eb4") == "Eb4"

    def test_scale_names_available(self):
        scales = get_scale_names()
        assert "major" in scales
        assert "natural_minor" in scales
        assert "dorian" in scales
        assert len(scales) >= 7

    def test_scale_spelling(self):
        assert scale_notes("F", "major") == ["F", "G", "A", "Bb", "C", "D", "E"]
        assert scale_notes("C", "minor") == ["C", "D", "Eb", "F", "G", "Ab", "Bb"]
        assert scale_notes("D", "major") == ["D", "E", "F#", "G", "A", "B", "C#"]

    def test_unknown_scale_raises(self):
        with pytest.raises(InvalidConfigError):
            scale_notes("C", "bebop")

    def test_chord_notes(self):
        assert chord_notes("C", "M") == ["C", "E", "G"]
        assert chord_notes("D", "m7") == ["D", "F", "A", "C"]
        assert chord_notes("C", "dim7") == ["C", "Eb", "Gb", "Bbb"]
        assert chord_notes("G", "7#5") == ["G", "B", "D#", "F"]
        with pytest.raises(InvalidConfigError):
            chord_notes("C", "sus4")

    def test_detect_chord(self):
        assert detect_chord(["C", "E", "G"]) == "CM"
        assert detect_chord(["D", "F", "A"]) == "Dm"
        assert detect_chord(["E", "G", "C"]) == "CM/E"
        assert detect_chord(["C", "D"]) == ""
        assert detect_chord([]) == ""


class TestChordEngine:
    """Tests for chord generation."""

    def test_major_scale_chord_qualities(self):
        """C major: C Dm Em F G Am Bdim"""
        chords = build_scale_chords("C", "major")
        names = [c.name for c in chords]
        assert names == ["CM", "Dm", "Em", "FM", "GM", "Am", "Bdim"]
        assert chords[0].display_name == "C Major Triad"
        assert chords[1].display_name == "D Minor Triad"
        assert chords[6].display_name == "B Diminished Triad"

    def test_minor_scale_chord_qualities(self):
        """A minor: Am Bdim C Dm Em F G"""
        names = [c.name for c in build_scale_chords("A", "natural_minor")]
        assert names == ["Am", "Bdim", "CM", "Dm", "Em", "FM", "GM"]

    def test_augmented_triad_keeps_detected_name(self):
        chord = build_scale_chords("C", "harmonic_minor")[2]
        assert chord.name == "Ebaug"
        assert chord.display_name == "Eb Ebaug"

    def test_chord_degrees(self):
        engine = ChordEngine(root="C", scale_name="major")
        chord = engine.get_chord(4)
        assert chord.degree == 5
        assert chord.root == "G"
        assert chord.notes == ("G", "B", "D")
        assert chord.kind == ChordKind.DIATONIC

    def test_degree_out_of_range(self):
        engine = ChordEngine()
        with pytest.raises(InvalidConfigError):
            engine.get_chord(7)
        with pytest.raises(InvalidConfigError):
            engine.get_chord(-1)

    def test_flat_key_spelling(self):
        engine = ChordEngine(root="Eb", scale_name="major")
        assert engine.get_chord(0).notes == ("Eb", "G", "Bb")
        assert engine.get_chord(3).notes == ("Ab", "C", "Eb")

    def test_scale_cycling(self):
        engine = ChordEngine(root="C", scale_name="major")
        assert engine.next_scale() == "natural_minor"
        assert engine.get_scale_display_name() == "C Natural Minor"
        assert engine.prev_scale() == "major"
        assert engine.prev_scale() == engine.get_available_scales()[-1]

    def test_scale_alias(self):
        engine = ChordEngine(scale_name="minor")
        assert engine.scale_name == "natural_minor"

    def test_change_key_wraps(self):
        engine = ChordEngine(root="C")
        assert engine.change_key(1) == "Db"
        assert engine.change_key(-1) == "C"
        assert engine.change_key(-1) == "B"
        assert engine.change_key(1) == "C"

    def test_sharp_root_change_key(self):
        engine = ChordEngine(root="F#")
        assert engine.change_key(1) == "G"

    def test_set_key_by_index(self):
        engine = ChordEngine()
        assert engine.set_key_by_index(3) == "Eb"
        with pytest.raises(InvalidConfigError):
            engine.set_key_by_index(12)

    def test_root_must_be_pitch_class(self):
        with pytest.raises(InvalidConfigError):
            ChordEngine(root="C4")

    def test_quality_override(self):
        chord = ChordEngine().get_chord(1)
        result = apply_overrides(chord, ChordQuality.MINOR_SEVENTH)
        assert result.notes == ("D", "F", "A", "C")
        assert result.display_name == "D Min 7"
        assert result.kind == ChordKind.OVERRIDE
        assert result.degree == 2

    def test_shift_only(self):
        chord = ChordEngine().get_chord(0)
        result = apply_overrides(chord, shift="2m")
        assert result.root == "Db"
        assert result.notes == ("Db", "F", "Ab")
        assert result.name == "DbM"
        assert result.display_name == "Db Major Triad"
        assert result.kind == ChordKind.TRANSPOSED

    def test_shift_and_quality(self):
        chord = ChordEngine().get_chord(0)
        result = apply_overrides(chord, ChordQuality.DOMINANT_SEVENTH, "-2m")
        assert result.notes == ("B", "D#", "F#", "A")
        assert result.display_name == "B Dominant 7th"

    def test_no_override_returns_same_chord(self):
        chord = ChordEngine().get_chord(2)
        assert apply_overrides(chord) is chord

    def test_lattice_chord(self):
        chord = lattice_chord("A", True)
        assert chord.notes == ("A", "C", "E")
        assert chord.degree is None
        assert chord.kind == ChordKind.LATTICE
        assert chord.label == "A Minor"


class TestScheduler:
    """Tests for the keyed one-shot timers."""

    def test_fires_after_delay(self):
        clock = MockClockHAL()
        scheduler = Scheduler(clock)
        fired = []
        scheduler.call_later("a", 25, lambda: fired.append("a"))
        clock.advance(24)
        assert scheduler.run_due() == 0
        clock.advance(1)
        assert scheduler.run_due() == 1
        assert fired == ["a"]
        assert not scheduler.is_pending("a")

    def test_same_key_replaces(self):
        clock = MockClockHAL()
        scheduler = Scheduler(clock)
        fired = []
        scheduler.call_later("a", 10, lambda: fired.append(1))
        scheduler.call_later("a", 10, lambda: fired.append(2))
        clock.advance(10)
        scheduler.run_due()
        assert fired == [2]

    def test_cancel(self):
        clock = MockClockHAL()
        scheduler = Scheduler(clock)
        fired = []
        scheduler.call_later("a", 10, lambda: fired.append(1))
        assert scheduler.cancel("a")
        assert not scheduler.cancel("a")
        clock.advance(50)
        scheduler.run_due()
        assert fired == []

    def test_earliest_first_and_cancel_from_callback(self):
        clock = MockClockHAL()
        scheduler = Scheduler(clock)
        fired = []
        scheduler.call_later("late", 20, lambda: fired.append("late"))

        def early():
            fired.append("early")
            scheduler.cancel("late")

        scheduler.call_later("early", 10, early)
        clock.advance(30)
        assert scheduler.run_due() == 1
        assert fired == ["early"]


class TestUIState:
    """Tests for UI state management."""

    def test_event_subscription(self):
        state = UIState()
        received = []

        def handler(data):
            received.append(data)

        state.subscribe(Event.LAYOUT_CHANGED, handler)
        state.set_layout(Layout.QWERTY)
        assert received == [{"layout": Layout.QWERTY}]

        state.unsubscribe(Event.LAYOUT_CHANGED, handler)
        state.set_layout(Layout.NUMPAD)
        assert len(received) == 1

    def test_same_layout_is_noop(self):
        state = UIState(Layout.QWERTY)
        assert not state.set_layout(Layout.QWERTY)

    def test_layout_cycle(self):
        state = UIState()
        assert state.layout == Layout.TONNETZ
        assert state.next_layout() == Layout.QWERTY
        state.set_layout(Layout.NUMPAD)
        assert state.next_layout() == Layout.TONNETZ

    def test_unknown_layout(self):
        with pytest.raises(InvalidConfigError):
            UIState("dvorak")

    def test_display_data(self):
        state = UIState()
        state.clear_display_dirty()
        state.set_chord_display("C Major Triad", ["C4", "E4", "G4", "C3"])
        assert state.display_dirty
        data = state.current_display
        assert data["chord_label"] == "C Major Triad"
        assert data["voiced_notes"] == ["C4", "E4", "G4", "C3"]
        state.clear_chord_display()
        assert state.current_display["chord_label"] == ""


def run_tests():
    """Run all tests and report results."""
    return run_test_classes([TestMusicTheory, TestChordEngine, TestScheduler, TestUIState])


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)

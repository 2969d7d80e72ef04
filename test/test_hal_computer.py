"""
Tests for the desktop MIDI hardware adapters.
Messages go to a fake port, so no MIDI backend is needed.

Run with: pytest
     or: python test/test_hal_computer.py
"""
import sys

sys.path.insert(0, "src/lib")
sys.path.insert(0, "src")

from plat_computer.hal_computer import (
    ConsoleDisplayHAL,
    MidiConfig,
    MidiLeadSynthHAL,
    MidiSynthHAL,
    MonotonicClockHAL,
    frequency_to_midi,
)

from mock_hal import FakeMidiPort, run_test_classes


class TestMidiSynth:
    """Tests for the chord voice."""

    def test_attack_sends_note_on(self):
        port = FakeMidiPort()
        synth = MidiSynthHAL(port)
        synth.attack(["C4", "Eb4", "G4", "C3"])
        notes = [(m.type, m.note, m.velocity, m.channel) for m in port.messages]
        assert notes == [
            ("note_on", 60, MidiConfig.VELOCITY, 0),
            ("note_on", 63, MidiConfig.VELOCITY, 0),
            ("note_on", 67, MidiConfig.VELOCITY, 0),
            ("note_on", 48, MidiConfig.VELOCITY, 0),
        ]

    def test_release_sends_note_off(self):
        port = FakeMidiPort()
        synth = MidiSynthHAL(port, channel=3)
        synth.release(["A4"])
        message = port.messages[0]
        assert message.type == "note_off"
        assert message.note == 69
        assert message.channel == 3

    def test_out_of_range_skipped(self):
        port = FakeMidiPort()
        synth = MidiSynthHAL(port)
        synth.attack(["C-2", "C4", "C10"])
        assert [m.note for m in port.messages] == [60]


class TestMidiLeadSynth:
    """Tests for the continuous-pitch voice."""

    def test_frequency_to_midi(self):
        assert frequency_to_midi(440.0) == 69
        assert frequency_to_midi(880.0) == 81
        assert abs(frequency_to_midi(261.63) - 60) < 0.01

    def test_attack_on_nearest_note(self):
        port = FakeMidiPort()
        lead = MidiLeadSynthHAL(port)
        lead.attack(440.0)
        assert port.messages[-1].type == "note_on"
        assert port.messages[-1].note == 69
        assert port.messages[-1].channel == MidiConfig.LEAD_CHANNEL
        assert port.of_type("pitchwheel")[0].pitch == 0

    def test_glide_bends(self):
        port = FakeMidiPort()
        lead = MidiLeadSynthHAL(port)
        lead.attack(440.0)
        lead.set_pitch(466.16)  # one semitone up
        bend = port.of_type("pitchwheel")[-1].pitch
        assert 4000 < bend < 4200
        assert len(port.of_type("note_on")) == 1

    def test_wide_glide_retriggers(self):
        port = FakeMidiPort()
        lead = MidiLeadSynthHAL(port)
        lead.attack(440.0)
        lead.set_pitch(880.0)
        assert [m.note for m in port.of_type("note_on")] == [69, 81]
        assert [m.note for m in port.of_type("note_off")] == [69]

    def test_release_resets_bend(self):
        port = FakeMidiPort()
        lead = MidiLeadSynthHAL(port)
        lead.set_pitch(500.0)
        lead.release()
        assert port.messages == []
        lead.attack(300.0)
        lead.release()
        assert port.messages[-2].type == "note_off"
        assert port.messages[-1].type == "pitchwheel"
        assert port.messages[-1].pitch == 0
        assert lead.note is None


class TestConsoleAndClock:
    """Tests for the console display and clock."""

    def test_display_buffers_until_update(self):
        display = ConsoleDisplayHAL()
        display.show_chord("C Major Triad", ["C4", "E4", "G4", "C3"])
        display.show_lattice(4, 3, True, True)
        assert display._lines == [
            "Chord: C Major Triad  [C4 - E4 - G4 - C3]",
            "Lattice: row=4 col=3 major (locked)",
        ]
        display.update()
        assert display._lines == []

    def test_clock_is_monotonic(self):
        clock = MonotonicClockHAL()
        first = clock.ticks_ms()
        assert clock.ticks_ms() >= first


def run_tests():
    return run_test_classes([TestMidiSynth, TestMidiLeadSynth, TestConsoleAndClock])


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)

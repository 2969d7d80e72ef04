"""
Desktop Hardware Implementation.
Chord and lead voices go out over a MIDI port via mido; the display is
the console.

When changing setup:
1. Update MidiConfig with new channels or bend range
2. Update create_computer_hardware_port() factory function
"""
import math
import time

import mido

from harmony_machine.hal_protocol import (
    SynthHAL,
    LeadSynthHAL,
    DisplayHAL,
    ClockHAL,
    HardwarePort,
)
from harmony_machine.music_theory import note_midi


# ============================================================================
# MIDI CONFIGURATION
# ============================================================================
class MidiConfig:
    """Channels and ranges used on the output port."""
    CHORD_CHANNEL = 0
    LEAD_CHANNEL = 1
    VELOCITY = 100

    NOTE_MIN = 0
    NOTE_MAX = 127

    # Synth must be set to the same pitch bend range (semitones)
    BEND_RANGE = 2
    PITCHWHEEL_MIN = -8192
    PITCHWHEEL_MAX = 8191


def frequency_to_midi(frequency):
    """Fractional MIDI note number for a frequency in Hz (A4 = 69)."""
    return 69 + 12 * math.log2(frequency / 440.0)


def list_outputs():
    """List all available MIDI output ports."""
    outputs = mido.get_output_names()
    if not outputs:
        print("No MIDI output ports found!")
        return []
    print("Available MIDI outputs:")
    for i, name in enumerate(outputs):
        print(f"  [{i}] {name}")
    return outputs


# ============================================================================
# HAL IMPLEMENTATIONS
# ============================================================================


class MidiSynthHAL(SynthHAL):
    """Polyphonic chord voice as note_on/note_off on one channel."""

    def __init__(self, port, channel=MidiConfig.CHORD_CHANNEL, velocity=MidiConfig.VELOCITY):
        """
        Args:
            port: mido output port (anything with send())
            channel: MIDI channel 0-15
            velocity: Note velocity 0-127
        """
        self.port = port
        self.channel = channel
        self.velocity = velocity

    def _send(self, kind, name, velocity):
        note = note_midi(name)
        if note < MidiConfig.NOTE_MIN or note > MidiConfig.NOTE_MAX:
            return  # Skip notes outside the MIDI range
        self.port.send(mido.Message(kind, channel=self.channel, note=note, velocity=velocity))

    def attack(self, notes):
        for name in notes:
            self._send("note_on", name, self.velocity)

    def release(self, notes):
        for name in notes:
            self._send("note_off", name, 0)


class MidiLeadSynthHAL(LeadSynthHAL):
    """
    Continuous-pitch voice: the nearest note plus pitch bend. A glide
    further than the bend range retriggers on a new note.
    """

    def __init__(self, port, channel=MidiConfig.LEAD_CHANNEL, velocity=MidiConfig.VELOCITY,
                 bend_range=MidiConfig.BEND_RANGE):
        self.port = port
        self.channel = channel
        self.velocity = velocity
        self.bend_range = bend_range
        self.note = None

    def _bend_value(self, offset):
        value = int(round(offset / self.bend_range * MidiConfig.PITCHWHEEL_MAX))
        return max(MidiConfig.PITCHWHEEL_MIN, min(MidiConfig.PITCHWHEEL_MAX, value))

    def _bend(self, target):
        self.port.send(
            mido.Message("pitchwheel", channel=self.channel, pitch=self._bend_value(target - self.note))
        )

    def attack(self, frequency):
        if self.note is not None:
            self.release()
        target = frequency_to_midi(frequency)
        self.note = max(MidiConfig.NOTE_MIN, min(MidiConfig.NOTE_MAX, int(round(target))))
        self._bend(target)
        self.port.send(
            mido.Message("note_on", channel=self.channel, note=self.note, velocity=self.velocity)
        )

    def set_pitch(self, frequency):
        if self.note is None:
            return
        target = frequency_to_midi(frequency)
        if abs(target - self.note) > self.bend_range:
            self.attack(frequency)
        else:
            self._bend(target)

    def release(self):
        if self.note is None:
            return
        self.port.send(mido.Message("note_off", channel=self.channel, note=self.note, velocity=0))
        self.port.send(mido.Message("pitchwheel", channel=self.channel, pitch=0))
        self.note = None


class ConsoleDisplayHAL(DisplayHAL):
    """Prints display changes to stdout."""

    def __init__(self):
        self._lines = []

    def clear(self):
        self._lines.append("Chord: -")

    def show_chord(self, label, voiced_notes):
        self._lines.append("Chord: %s  [%s]" % (label, " - ".join(voiced_notes)))

    def show_scale(self, scale_name, ticks=None):
        self._lines.append("Key: %s" % scale_name)

    def show_modifiers(self, active_names):
        self._lines.append("Modifiers: %s" % (", ".join(active_names) or "-"))

    def show_layout(self, layout):
        self._lines.append("Layout: %s" % layout)

    def show_lattice(self, active_row, active_col, shift_active, shift_locked):
        layer = "major" if shift_active else "minor"
        if shift_locked:
            layer += " (locked)"
        self._lines.append("Lattice: row=%s col=%s %s" % (active_row, active_col, layer))

    def update(self):
        for line in self._lines:
            print(line)
        self._lines = []


class MonotonicClockHAL(ClockHAL):
    """Milliseconds from time.monotonic()."""

    def ticks_ms(self):
        return int(time.monotonic() * 1000)


def create_computer_hardware_port(port_name=None):
    """
    Factory function to create desktop hardware on a MIDI output.

    Args:
        port_name: MIDI output name; the first available port if None

    Returns:
        (HardwarePort, opened mido port) - close the port when done
    """
    if port_name is None:
        outputs = mido.get_output_names()
        if not outputs:
            raise RuntimeError("No MIDI output ports found")
        port_name = outputs[0]

    port = mido.open_output(port_name)
    hardware = HardwarePort(
        MidiSynthHAL(port),
        MidiLeadSynthHAL(port),
        ConsoleDisplayHAL(),
        MonotonicClockHAL(),
    )
    return hardware, port

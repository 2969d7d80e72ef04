"""
Hardware Abstraction Layer Protocol Definitions.
These are abstract base classes that each platform must implement.

This allows the same application code to run against:
- A MIDI port on a desktop computer
- A browser audio engine
- Recording mocks for testing
"""


class SynthHAL:
    """Abstract interface for the polyphonic chord synthesizer."""

    def attack(self, notes):
        """
        Start notes.

        Args:
            notes: List of pitched note names, e.g. ["C4", "E4", "G4", "C3"]
        """
        raise NotImplementedError

    def release(self, notes):
        """
        Stop notes.

        Args:
            notes: List of pitched note names
        """
        raise NotImplementedError


class LeadSynthHAL:
    """Abstract interface for the monophonic continuous-pitch voice."""

    def attack(self, frequency):
        """
        Start the voice.

        Args:
            frequency: Pitch in Hz
        """
        raise NotImplementedError

    def set_pitch(self, frequency):
        """Glide to a new pitch in Hz."""
        raise NotImplementedError

    def release(self):
        """Stop the voice."""
        raise NotImplementedError


class DisplayHAL:
    """Abstract interface for the chord/status display."""

    def clear(self):
        """Clear the chord name and note readout."""
        raise NotImplementedError

    def show_chord(self, label, voiced_notes):
        """
        Display the currently playing chord.

        Args:
            label: Chord label (e.g. "D Minor Triad")
            voiced_notes: Sounding note names, in voicing order
        """
        raise NotImplementedError

    def show_scale(self, scale_name, ticks=None):
        """
        Display the current key.

        Args:
            scale_name: e.g. "Eb Major"
            ticks: Optional theremin grid from theremin_ticks()
        """
        raise NotImplementedError

    def show_modifiers(self, active_names):
        """Display the active modifier names."""
        raise NotImplementedError

    def show_layout(self, layout):
        """Display the input layout name."""
        raise NotImplementedError

    def show_lattice(self, active_row, active_col, shift_active, shift_locked):
        """
        Display lattice keyboard state.

        Args:
            active_row: Row index 0-5 or None
            active_col: Column number 1-8 or None
            shift_active: Major layer selected
            shift_locked: Major layer pinned by double press
        """
        raise NotImplementedError

    def update(self):
        """Push changes to the display."""
        raise NotImplementedError


class ClockHAL:
    """Abstract interface for a monotonic millisecond clock."""

    def ticks_ms(self):
        """
        Returns:
            Current time in milliseconds (monotonic)
        """
        raise NotImplementedError


class HardwarePort:
    """
    Complete hardware port interface.
    A platform provides an instance of this with all HAL implementations.
    """

    def __init__(self, synth, lead_synth, display, clock):
        """
        Args:
            synth: SynthHAL implementation
            lead_synth: LeadSynthHAL implementation
            display: DisplayHAL implementation
            clock: ClockHAL implementation
        """
        self.synth = synth
        self.lead_synth = lead_synth
        self.display = display
        self.clock = clock

    def update_outputs(self):
        """Push all output changes."""
        self.display.update()

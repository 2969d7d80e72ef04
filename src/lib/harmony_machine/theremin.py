"""
Continuous-pitch lead ("theremin") played by pointer height or device tilt.
"""
from .constants import Theremin as ThereminConst, Music
from .music_theory import parse_note, scale_notes


def clamp(value, low, high):
    return max(low, min(high, value))


def frequency_for_position(normalized):
    """
    Exponential pitch mapping: 0.0 -> C3, 1.0 -> C6.

    Args:
        normalized: Position 0.0 (bottom) - 1.0 (top); clamped
    """
    normalized = clamp(normalized, 0.0, 1.0)
    ratio = ThereminConst.MAX_FREQ / ThereminConst.MIN_FREQ
    return ThereminConst.MIN_FREQ * ratio ** normalized


def position_for_tilt(beta):
    """Front-to-back tilt in degrees -> normalized position."""
    tilt = clamp(beta, ThereminConst.TILT_MIN, ThereminConst.TILT_MAX)
    return (tilt - ThereminConst.TILT_MIN) / float(ThereminConst.TILT_MAX - ThereminConst.TILT_MIN)


def theremin_ticks(root, scale_name):
    """
    Semitone grid for the pitch bar, C3 to C6.

    Returns:
        List of (position, kind) with position 0.0-1.0 from the bottom
        and kind root / natural / accidental
    """
    root_chroma = parse_note(root).chroma
    scale_chromas = set(parse_note(n).chroma for n in scale_notes(root, scale_name))
    ticks = []
    for i in range(ThereminConst.SEMITONES + 1):
        chroma = i % Music.NOTES_PER_OCTAVE
        if chroma == root_chroma:
            kind = ThereminConst.TICK_ROOT
        elif chroma in scale_chromas:
            kind = ThereminConst.TICK_NATURAL
        else:
            kind = ThereminConst.TICK_ACCIDENTAL
        ticks.append((i / float(ThereminConst.SEMITONES), kind))
    return ticks


class ThereminVoice:
    """Drives a LeadSynthHAL from pointer or orientation input."""

    def __init__(self, lead_synth):
        """
        Args:
            lead_synth: LeadSynthHAL implementation
        """
        self.lead_synth = lead_synth
        self.active = False
        self.orientation_enabled = False
        self.frequency = None

    def start(self, position):
        """Pointer down at a normalized height."""
        self.active = True
        self.frequency = frequency_for_position(position)
        self.lead_synth.attack(self.frequency)

    def move(self, position):
        """Pointer moved; glides only while sounding."""
        if not self.active:
            return
        self.frequency = frequency_for_position(position)
        self.lead_synth.set_pitch(self.frequency)

    def stop(self):
        if not self.active:
            return
        self.active = False
        self.orientation_enabled = False
        self.lead_synth.release()

    def start_orientation(self):
        """Tilt control: sound at the bottom of the range until samples arrive."""
        if self.orientation_enabled:
            return
        self.orientation_enabled = True
        self.start(0.0)

    def orientation_sample(self, beta):
        if not self.orientation_enabled:
            return
        self.move(position_for_tilt(beta))

    def stop_orientation(self):
        if not self.orientation_enabled:
            return
        self.stop()

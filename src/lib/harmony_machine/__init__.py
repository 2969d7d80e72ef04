"""
Harmony Machine - Platform-independent voice-led chord instrument logic.
"""

from .music_theory import (
    KEY_ORDER,
    SCALES,
    CHORD_FORMULAS,
    get_scale_names,
    scale_notes,
    chord_notes,
    detect_chord,
    simplify,
    transpose,
)
from .errors import HarmonyMachineError, InvalidConfigError
from .chord_engine import (
    ChordEngine,
    ChordKind,
    ChordQuality,
    ScaleDegreeChord,
    apply_overrides,
    build_scale_chords,
)
from .modifiers import ModifierState, resolve_quality, resolve_transposition
from .scheduler import Scheduler
from .voicing import VoicingEngine
from .note_ledger import NoteLedger, NoteDelta
from .lattice import LatticeKeyboard, tonnetz_chroma, lattice_cells
from .theremin import ThereminVoice, theremin_ticks
from .ui_state import UIState, Event
from .hal_protocol import (
    SynthHAL,
    LeadSynthHAL,
    DisplayHAL,
    ClockHAL,
    HardwarePort,
)
from .harmony_machine_app import HarmonyMachineApp

__all__ = [
    # Music Theory
    "KEY_ORDER",
    "SCALES",
    "CHORD_FORMULAS",
    "get_scale_names",
    "scale_notes",
    "chord_notes",
    "detect_chord",
    "simplify",
    "transpose",
    # Errors
    "HarmonyMachineError",
    "InvalidConfigError",
    # Chords
    "ChordEngine",
    "ChordKind",
    "ChordQuality",
    "ScaleDegreeChord",
    "apply_overrides",
    "build_scale_chords",
    # Modifiers
    "ModifierState",
    "resolve_quality",
    "resolve_transposition",
    # Timing
    "Scheduler",
    # Voicing and notes
    "VoicingEngine",
    "NoteLedger",
    "NoteDelta",
    # Lattice
    "LatticeKeyboard",
    "tonnetz_chroma",
    "lattice_cells",
    # Theremin
    "ThereminVoice",
    "theremin_ticks",
    # UI State
    "UIState",
    "Event",
    # HAL Protocol
    "SynthHAL",
    "LeadSynthHAL",
    "DisplayHAL",
    "ClockHAL",
    "HardwarePort",
    # Application
    "HarmonyMachineApp",
]

"""
Constants for the Harmony Machine application.
All magic strings and numbers are defined here for easy maintenance.
"""


# ============================================================================
# KEYBOARD LAYOUTS
# ============================================================================
class Layout:
    """Input layout constants."""
    TONNETZ = "tonnetz"
    QWERTY = "qwerty"
    NUMPAD = "numpad"

    # List of all layouts in cycle order
    ALL = [TONNETZ, QWERTY, NUMPAD]


# ============================================================================
# CHORD MODIFIERS
# ============================================================================
class Modifier:
    """Modifier names, split into two independent exclusivity groups."""
    MAJOR = "major"
    MINOR = "minor"
    DOMINANT = "dominant"
    DIMINISHED = "diminished"
    MAJOR_SIXTH = "major_sixth"
    AUGMENTED = "augmented"
    MAJOR_SEVENTH = "major_seventh"
    HALF_DIMINISHED = "half_diminished"
    MINOR_SEVENTH = "minor_seventh"
    MINOR_SIX = "minor_six"

    ROOT_SHIFT_UP = "root_shift_up"
    ROOT_SHIFT_DOWN = "root_shift_down"

    QUALITY = (
        DOMINANT,
        MINOR,
        DIMINISHED,
        MAJOR_SIXTH,
        AUGMENTED,
        MAJOR_SEVENTH,
        HALF_DIMINISHED,
        MINOR_SEVENTH,
        MINOR_SIX,
        MAJOR,
    )
    TRANSPOSITION = (ROOT_SHIFT_UP, ROOT_SHIFT_DOWN)
    ALL = QUALITY + TRANSPOSITION

    # Pairs allowed to stay active together (compound qualities)
    COMPOUNDS = (
        frozenset((MINOR, DOMINANT)),
        frozenset((MINOR, MAJOR_SIXTH)),
    )


# ============================================================================
# TIMING (milliseconds)
# ============================================================================
class Timing:
    """Debounce and double-press windows."""
    MODIFIER_DECAY_MS = 150
    NOTE_START_DEBOUNCE_MS = 25
    DOUBLE_PRESS_MS = 400


# ============================================================================
# VOICING
# ============================================================================
class VoicingRange:
    """Octave bands and ceiling for the voice-leading search."""
    CANDIDATE_OCTAVES = (3, 4)
    CEILING_NOTE = "C5"
    SEED_OCTAVE = 4       # first chord ever played
    FALLBACK_OCTAVE = 4   # voice leading disabled


# ============================================================================
# TONNETZ LATTICE
# ============================================================================
class Lattice:
    """Lattice board bounds and keyboard axes."""
    F_MIN = -2
    F_MAX = 5
    T_MIN = -1
    T_MAX = 4

    # Row keys (top to bottom): row 0 = t=4, row 5 = t=-1
    ROW_KEYS = ["q", "w", "e", "r", "t", "y"]
    COL_COUNT = F_MAX - F_MIN + 1  # 8
    SHIFT_KEY = "Shift"

    # Ledger slot used by the lattice (scale degrees use 0-6)
    SLOT = "tonnetz"


# ============================================================================
# THEREMIN
# ============================================================================
class Theremin:
    """Continuous pitch range and tilt mapping."""
    MIN_FREQ = 130.81   # C3
    MAX_FREQ = 1046.50  # C6
    SEMITONES = 36      # 3 octaves

    TILT_MIN = 30
    TILT_MAX = 80

    TICK_ROOT = "root"
    TICK_NATURAL = "natural"
    TICK_ACCIDENTAL = "accidental"


# ============================================================================
# KEY BINDINGS
# ============================================================================
class KeyMap:
    """Physical key bindings for the QWERTY and numpad layouts."""
    MODIFIER_KEYS = {
        Modifier.MAJOR: ("q", "Q", "Enter"),
        Modifier.MINOR: ("w", "W", "-"),
        Modifier.DOMINANT: ("e", "E", "/"),
        Modifier.MINOR_SEVENTH: ("s", "S", "Backspace"),
        Modifier.MAJOR_SEVENTH: ("a", "A", "9"),
        Modifier.DIMINISHED: ("d", "D", "*"),
        Modifier.AUGMENTED: ("v", "V", "+"),
        Modifier.HALF_DIMINISHED: ("c", "C", "Escape", "NumLock", "Tab"),
        Modifier.ROOT_SHIFT_DOWN: ("f", "F", "0"),
        Modifier.ROOT_SHIFT_UP: ("r", "R", "."),
        Modifier.MAJOR_SIXTH: ("z", "Z", "8"),
        Modifier.MINOR_SIX: ("x", "X"),
    }

    NOTE_KEYS = ("1", "2", "3", "4", "5", "6", "7")

    START_AUDIO_KEY = "Enter"

    KEY_UP = ("+", "=")
    KEY_DOWN = ("-", "_")

    # k + number: 1=C, 2=Db, 3=D, 4=Eb, 5=E, 6=F, 7=Gb, 8=G, 9=Ab, 0=A, -=Bb, +=B
    KEY_CHANGE_PREFIX = ("k", "K")
    KEY_CHANGE_COMBO = {
        "1": 0,
        "2": 1,
        "3": 2,
        "4": 3,
        "5": 4,
        "6": 5,
        "7": 6,
        "8": 7,
        "9": 8,
        "0": 9,
        "-": 10,
        "+": 11,
        # caps lock / shifted variants
        "_": 10,
        "=": 11,
    }

    @classmethod
    def modifiers_for(cls, key):
        """Return the modifier names bound to a key (usually zero or one)."""
        return [name for name, keys in cls.MODIFIER_KEYS.items() if key in keys]


# ============================================================================
# DEFAULTS
# ============================================================================
class Defaults:
    """Session defaults."""
    ROOT = "C"
    SCALE = "major"
    LAYOUT = Layout.TONNETZ
    VOICE_LEADING = True


# ============================================================================
# MUSIC CONSTANTS
# ============================================================================
class Music:
    """Music theory constants."""
    NOTES_PER_OCTAVE = 12
    SCALE_DEGREES = 7
    SEMITONE_UP = "2m"
    SEMITONE_DOWN = "-2m"

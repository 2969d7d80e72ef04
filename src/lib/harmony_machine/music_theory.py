"""
Pure music theory calculations - no hardware dependencies.
Notes are letter-spelled strings ("C", "Eb", "F#4", "Bbb3"); a name
without an octave is a pitch class.
"""
import re
from collections import namedtuple

from .constants import Music
from .errors import InvalidConfigError

LETTERS = "CDEFGAB"

# Semitone offset of each natural letter from C
NATURAL_CHROMA = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# Canonical pitch-class spelling, one name per chroma
KEY_ORDER = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]
SHARP_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Scale definitions as interval patterns from root
SCALES = {
    "major": [0, 2, 4, 5, 7, 9, 11],  # W-W-H-W-W-W-H
    "natural_minor": [0, 2, 3, 5, 7, 8, 10],  # W-H-W-W-H-W-W
    "harmonic_minor": [0, 2, 3, 5, 7, 8, 11],  # W-H-W-W-H-A2-H
    "melodic_minor": [0, 2, 3, 5, 7, 9, 11],  # W-H-W-W-W-W-H (ascending)
    "dorian": [0, 2, 3, 5, 7, 9, 10],
    "phrygian": [0, 1, 3, 5, 7, 8, 10],
    "lydian": [0, 2, 4, 6, 7, 9, 11],
    "mixolydian": [0, 2, 4, 5, 7, 9, 10],
    "locrian": [0, 1, 3, 5, 6, 8, 10],
}
SCALE_ALIASES = {"minor": "natural_minor", "aeolian": "natural_minor", "ionian": "major"}

# Chord formulas as spelled intervals from the root
CHORD_FORMULAS = {
    "M": ["1P", "3M", "5P"],
    "m": ["1P", "3m", "5P"],
    "dim": ["1P", "3m", "5d"],
    "aug": ["1P", "3M", "5A"],
    "7": ["1P", "3M", "5P", "7m"],
    "maj7": ["1P", "3M", "5P", "7M"],
    "m7": ["1P", "3m", "5P", "7m"],
    "dim7": ["1P", "3m", "5d", "7d"],
    "m7b5": ["1P", "3m", "5d", "7m"],
    "6": ["1P", "3M", "5P", "6M"],
    "m6": ["1P", "3m", "5P", "6M"],
    "7#5": ["1P", "3M", "5A", "7m"],
}

# Reference size of each simple interval number (perfect or major)
_INTERVAL_REFERENCE = {1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11}
_PERFECT_NUMBERS = (1, 4, 5)

_NOTE_RE = re.compile(r"^([A-Ga-g])(#+|b+|x)?(-?\d+)?$")
_INTERVAL_RE = re.compile(r"^(-?)(\d+)([PMmAd])$")

Note = namedtuple("Note", ["letter", "alter", "octave", "chroma", "midi"])


def parse_note(name):
    """
    Parse a note or pitch-class name.

    Args:
        name: e.g. "C", "Eb4", "F##3", "Bbb2"

    Returns:
        Note(letter, alter, octave, chroma, midi); octave and midi are
        None for a bare pitch class.
    """
    match = _NOTE_RE.match(str(name).strip())
    if not match:
        raise InvalidConfigError("Invalid note name: %r" % (name,))
    letter, accidental, octave = match.groups()
    letter = letter.upper()
    if not accidental:
        alter = 0
    elif accidental == "x":
        alter = 2
    elif accidental[0] == "#":
        alter = len(accidental)
    else:
        alter = -len(accidental)
    chroma = (NATURAL_CHROMA[letter] + alter) % Music.NOTES_PER_OCTAVE
    midi = None
    if octave is not None:
        octave = int(octave)
        midi = (octave + 1) * Music.NOTES_PER_OCTAVE + NATURAL_CHROMA[letter] + alter
    return Note(letter, alter, octave, chroma, midi)


def format_note(letter, alter, octave=None):
    """Build a note name from its parts."""
    accidental = "#" * alter if alter > 0 else "b" * -alter
    name = letter + accidental
    if octave is not None:
        name += str(octave)
    return name


def pitch_class(name):
    """Strip the octave from a note name, keeping its spelling."""
    note = parse_note(name)
    return format_note(note.letter, note.alter)


def note_midi(name):
    """MIDI number of a pitched note name."""
    note = parse_note(name)
    if note.midi is None:
        raise InvalidConfigError("Note has no octave: %r" % (name,))
    return note.midi


def note_name(midi_note):
    """Convert MIDI note number to note name."""
    return SHARP_NAMES[midi_note % Music.NOTES_PER_OCTAVE]


def simplify(name):
    """
    Enharmonic simplification.
    Double accidentals and E#/B#/Cb/Fb are respelled; the octave follows
    the sounding pitch (Cb4 -> B3). Everything else is left alone.
    """
    note = parse_note(name)
    plain = format_note(note.letter, note.alter)
    if abs(note.alter) <= 1 and plain not in ("E#", "B#", "Cb", "Fb"):
        return format_note(note.letter, note.alter, note.octave)
    names = SHARP_NAMES if note.alter > 0 else KEY_ORDER
    simple = names[note.chroma]
    if note.octave is None:
        return simple
    return simple + str(note.midi // Music.NOTES_PER_OCTAVE - 1)


def _wrap_alter(delta):
    delta %= Music.NOTES_PER_OCTAVE
    if delta > 6:
        delta -= Music.NOTES_PER_OCTAVE
    return delta


def _parse_interval(interval):
    match = _INTERVAL_RE.match(interval)
    if not match:
        raise InvalidConfigError("Invalid interval: %r" % (interval,))
    sign, number, quality = match.groups()
    number = int(number)
    if number < 1:
        raise InvalidConfigError("Invalid interval: %r" % (interval,))
    simple = (number - 1) % 7 + 1
    octaves = (number - 1) // 7
    if simple in _PERFECT_NUMBERS:
        offsets = {"P": 0, "d": -1, "A": 1}
    else:
        offsets = {"M": 0, "m": -1, "d": -2, "A": 1}
    if quality not in offsets:
        raise InvalidConfigError("Invalid interval quality: %r" % (interval,))
    semitones = _INTERVAL_REFERENCE[simple] + offsets[quality] + octaves * Music.NOTES_PER_OCTAVE
    direction = -1 if sign else 1
    return direction, number - 1, semitones


def transpose(name, interval):
    """
    Transpose a note or pitch class by a spelled interval.

    Args:
        name: e.g. "C", "E4"
        interval: e.g. "3M", "5P", "-2m"

    Returns:
        Spelled result, e.g. transpose("C", "2m") == "Db",
        transpose("C4", "-2m") == "B3"
    """
    note = parse_note(name)
    direction, steps, semitones = _parse_interval(interval)
    letter_index = LETTERS.index(note.letter) + direction * steps
    letter = LETTERS[letter_index % 7]
    if note.octave is None:
        target = note.chroma + direction * semitones
        return format_note(letter, _wrap_alter(target - NATURAL_CHROMA[letter]))
    octave = note.octave + letter_index // 7
    target_midi = note.midi + direction * semitones
    alter = target_midi - ((octave + 1) * Music.NOTES_PER_OCTAVE + NATURAL_CHROMA[letter])
    return format_note(letter, alter, octave)


def interval_between(first, second):
    """
    Spelled interval from one pitch class up to another, e.g. "3M", "5d".
    Octaves are ignored.
    """
    a = parse_note(first)
    b = parse_note(second)
    number = (LETTERS.index(b.letter) - LETTERS.index(a.letter)) % 7 + 1
    semitones = (b.chroma - a.chroma) % Music.NOTES_PER_OCTAVE
    delta = semitones - _INTERVAL_REFERENCE[number]
    if delta > 6:
        delta -= Music.NOTES_PER_OCTAVE
    elif delta < -6:
        delta += Music.NOTES_PER_OCTAVE

    if delta > 0:
        quality = "A" * delta
    elif number in _PERFECT_NUMBERS:
        quality = "P" if delta == 0 else "d" * -delta
    elif delta == 0:
        quality = "M"
    elif delta == -1:
        quality = "m"
    else:
        quality = "d" * (-delta - 1)
    return str(number) + quality


def get_scale_names():
    """Return list of available scale names."""
    return list(SCALES.keys())


def resolve_scale_name(scale_name):
    """Canonical scale name, or InvalidConfigError."""
    scale_name = SCALE_ALIASES.get(scale_name, scale_name)
    if scale_name not in SCALES:
        raise InvalidConfigError(
            "Unknown scale type %r (available: %s)" % (scale_name, ", ".join(SCALES))
        )
    return scale_name


def scale_notes(root, scale_name):
    """
    Spell the seven notes of a scale, one letter per degree.

    Args:
        root: Pitch class, e.g. "F"
        scale_name: Key of SCALES (or an alias)

    Returns:
        List of 7 pitch-class names, e.g. F major -> F G A Bb C D E
    """
    pattern = SCALES[resolve_scale_name(scale_name)]
    tonic = parse_note(root)
    if tonic.octave is not None:
        raise InvalidConfigError("Scale root must be a pitch class: %r" % (root,))
    start = LETTERS.index(tonic.letter)
    notes = []
    for degree, semitones in enumerate(pattern):
        letter = LETTERS[(start + degree) % 7]
        chroma = tonic.chroma + semitones
        notes.append(format_note(letter, _wrap_alter(chroma - NATURAL_CHROMA[letter])))
    return notes


def chord_notes(root, symbol):
    """
    Build a chord from its root and symbol, e.g. ("C", "dim7") ->
    ["C", "Eb", "Gb", "Bbb"].
    """
    if symbol not in CHORD_FORMULAS:
        raise InvalidConfigError("Unknown chord symbol: %r" % (symbol,))
    return [transpose(root, interval) for interval in CHORD_FORMULAS[symbol]]


def _formula_semitones(symbol):
    return frozenset(
        _parse_interval(interval)[2] % Music.NOTES_PER_OCTAVE
        for interval in CHORD_FORMULAS[symbol]
    )


def detect_chord(notes):
    """
    Best-guess chord name for a set of notes.
    Root position wins; otherwise the bass is appended ("CM/E").

    Returns:
        Name such as "CM", "Dm7", or "" when nothing matches.
    """
    if not notes:
        return ""
    parsed = [parse_note(n) for n in notes]
    chromas = [n.chroma for n in parsed]
    bass = format_note(parsed[0].letter, parsed[0].alter)
    for candidate in parsed:
        intervals = frozenset((c - candidate.chroma) % Music.NOTES_PER_OCTAVE for c in chromas)
        for symbol in CHORD_FORMULAS:
            if intervals == _formula_semitones(symbol):
                root = format_note(candidate.letter, candidate.alter)
                name = root + symbol
                if root != bass:
                    name += "/" + bass
                return name
    return ""

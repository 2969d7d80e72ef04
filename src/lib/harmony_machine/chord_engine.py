"""
Chord generation engine - pure business logic.
No hardware dependencies.
"""
from dataclasses import dataclass, replace
from enum import Enum

from .constants import Music, Defaults
from .errors import InvalidConfigError
from .music_theory import (
    KEY_ORDER,
    chord_notes,
    detect_chord,
    get_scale_names,
    interval_between,
    parse_note,
    pitch_class,
    resolve_scale_name,
    scale_notes,
    transpose,
)


class ChordKind:
    """How a chord was produced."""
    DIATONIC = "diatonic"
    OVERRIDE = "override"
    TRANSPOSED = "transposed"
    LATTICE = "lattice"


class ChordQuality(Enum):
    """Quality override selected by the modifier keys; value is the chord symbol."""
    MINOR_SEVENTH = "m7"
    MINOR_SIXTH = "m6"
    DOMINANT_SEVENTH = "7"
    MINOR = "m"
    DIMINISHED_SEVENTH = "dim7"
    MAJOR_SIXTH = "6"
    AUGMENTED_SEVENTH = "7#5"
    MAJOR_SEVENTH = "maj7"
    HALF_DIMINISHED_SEVENTH = "m7b5"
    MAJOR = "M"

    @property
    def label(self):
        return QUALITY_LABELS[self]


QUALITY_LABELS = {
    ChordQuality.DOMINANT_SEVENTH: "Dominant 7th",
    ChordQuality.MINOR: "Minor Triad",
    ChordQuality.DIMINISHED_SEVENTH: "Diminished 7th",
    ChordQuality.MAJOR_SIXTH: "Major 6th",
    ChordQuality.AUGMENTED_SEVENTH: "Aug 7",
    ChordQuality.MAJOR_SEVENTH: "Maj 7",
    ChordQuality.HALF_DIMINISHED_SEVENTH: "m7b5",
    ChordQuality.MINOR_SEVENTH: "Min 7",
    ChordQuality.MINOR_SIXTH: "Minor 6th",
    ChordQuality.MAJOR: "Major",
}

# (third, fifth) intervals above the root -> diatonic triad label
TRIAD_LABELS = {
    ("3M", "5P"): "Major Triad",
    ("3m", "5P"): "Minor Triad",
    ("3m", "5d"): "Diminished Triad",
}


@dataclass(frozen=True)
class ScaleDegreeChord:
    """
    A chord ready for voicing.

    degree: 1-7 within the scale (None for lattice chords)
    root: pitch class name
    notes: pitch classes, root first
    name: detected chord name, e.g. "Dm" (may be "")
    display_name: e.g. "D Minor Triad"
    kind: one of ChordKind
    """
    degree: object
    root: str
    notes: tuple
    name: str
    display_name: str
    kind: str = ChordKind.DIATONIC

    @property
    def label(self):
        """Text shown for the chord."""
        return self.display_name or self.name or self.notes[0]


def classify_triad(notes, fallback):
    """
    Label a stacked-thirds triad by its third and fifth.

    Args:
        notes: [root, third, fifth] pitch classes
        fallback: Name to keep for any other interval pattern
    """
    third = interval_between(notes[0], notes[1])
    fifth = interval_between(notes[0], notes[2])
    return TRIAD_LABELS.get((third, fifth), fallback)


def build_scale_chords(root, scale_name):
    """
    Build the seven diatonic triads of a scale.

    Returns:
        List of ScaleDegreeChord, degree 1 first
    """
    notes = scale_notes(root, scale_name)
    chords = []
    for index, chord_root in enumerate(notes):
        triad = tuple(notes[(index + step) % Music.SCALE_DEGREES] for step in (0, 2, 4))
        name = detect_chord(triad)
        quality = classify_triad(triad, name)
        chords.append(
            ScaleDegreeChord(
                degree=index + 1,
                root=chord_root,
                notes=triad,
                name=name,
                display_name="%s %s" % (chord_root, quality),
                kind=ChordKind.DIATONIC,
            )
        )
    return chords


def apply_overrides(chord, quality=None, shift=None):
    """
    Apply modifier overrides to a chord.

    Args:
        chord: Base ScaleDegreeChord
        quality: ChordQuality or None
        shift: Root transposition interval ("2m" / "-2m") or None

    Returns:
        A new chord, or the base chord when nothing applies
    """
    effective_root = transpose(chord.root, shift) if shift else chord.root

    # A quality override rebuilds the chord from scratch
    if quality is not None:
        notes = tuple(chord_notes(effective_root, quality.value))
        return replace(
            chord,
            root=effective_root,
            notes=notes,
            name=effective_root + quality.value,
            display_name="%s %s" % (effective_root, quality.label),
            kind=ChordKind.OVERRIDE,
        )

    if shift:
        notes = tuple(transpose(n, shift) for n in chord.notes)
        words = chord.display_name.split(" ")
        words[0] = effective_root
        return replace(
            chord,
            root=effective_root,
            notes=notes,
            name=detect_chord(notes),
            display_name=" ".join(words),
            kind=ChordKind.TRANSPOSED,
        )

    return chord


def lattice_chord(root, is_minor):
    """Major or minor triad for a lattice triangle."""
    symbol = "m" if is_minor else "M"
    notes = tuple(chord_notes(root, symbol))
    return ScaleDegreeChord(
        degree=None,
        root=root,
        notes=notes,
        name=root + symbol,
        display_name="%s %s" % (root, "Minor" if is_minor else "Major"),
        kind=ChordKind.LATTICE,
    )


class ChordEngine:
    """
    Derives diatonic chords for the current key and scale.
    Pure logic - no hardware dependencies.
    """

    def __init__(self, root=Defaults.ROOT, scale_name=Defaults.SCALE):
        """
        Args:
            root: Key root pitch class (e.g. "C", "Eb")
            scale_name: Name of scale to use
        """
        self._available_scales = get_scale_names()
        self._root = Defaults.ROOT
        self._scale_name = Defaults.SCALE
        self.root = root
        self.scale_name = scale_name

    @property
    def root(self):
        return self._root

    @root.setter
    def root(self, name):
        note = parse_note(name)
        if note.octave is not None:
            raise InvalidConfigError("Key root must be a pitch class: %r" % (name,))
        self._root = pitch_class(name)

    @property
    def scale_name(self):
        return self._scale_name

    @scale_name.setter
    def scale_name(self, name):
        self._scale_name = resolve_scale_name(name)

    @property
    def scale_index(self):
        return self._available_scales.index(self._scale_name)

    @scale_index.setter
    def scale_index(self, index):
        index = index % len(self._available_scales)
        self._scale_name = self._available_scales[index]

    def get_available_scales(self):
        """Return list of available scale names."""
        return self._available_scales

    def get_scale_display_name(self):
        """Return formatted scale name for display, e.g. "C Natural Minor"."""
        scale_display = self._scale_name.replace("_", " ").title()
        return self._root + " " + scale_display

    def get_scale_notes(self):
        return scale_notes(self._root, self._scale_name)

    def get_scale_chords(self):
        """Return the 7 diatonic chords (recomputed on every call)."""
        return build_scale_chords(self._root, self._scale_name)

    def get_chord(self, degree):
        """
        Get the diatonic chord for a scale degree.

        Args:
            degree: Scale degree 0-6 (I-VII)

        Returns:
            ScaleDegreeChord
        """
        if not isinstance(degree, int) or not 0 <= degree < Music.SCALE_DEGREES:
            raise InvalidConfigError("Scale degree out of range 0-6: %r" % (degree,))
        return self.get_scale_chords()[degree]

    def next_scale(self):
        """Cycle to next scale, return new scale name."""
        self.scale_index = self.scale_index + 1
        return self._scale_name

    def prev_scale(self):
        """Cycle to previous scale, return new scale name."""
        self.scale_index = self.scale_index - 1
        return self._scale_name

    def set_key_by_index(self, index):
        """Set the key from its position in KEY_ORDER (0=C ... 11=B)."""
        if not 0 <= index < len(KEY_ORDER):
            raise InvalidConfigError("Key index out of range 0-11: %r" % (index,))
        self._root = KEY_ORDER[index]
        return self._root

    def change_key(self, direction):
        """Move the key root by semitones along KEY_ORDER, wrapping."""
        index = parse_note(self._root).chroma
        self._root = KEY_ORDER[(index + direction) % len(KEY_ORDER)]
        return self._root

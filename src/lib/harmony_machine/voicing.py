"""
Voice-leading voicing search.

Assigns octaves to a chord's pitch classes so that the new voicing
moves as little as possible from the previous one.
"""
from .constants import VoicingRange
from .music_theory import note_midi, parse_note, simplify


def generate_voicing_options(notes, octaves):
    """
    Close-position voicings for every inversion in each base octave.

    Args:
        notes: Pitch classes, e.g. ["C", "E", "G"]
        octaves: Base octave numbers, e.g. (3, 4)

    Returns:
        len(notes) * len(octaves) lists of pitched names, octave-major
        order, e.g. [["C3", "E3", "G3"], ["E3", "G3", "C4"], ...]
    """
    count = len(notes)
    inversions = [[notes[(start + i) % count] for i in range(count)] for start in range(count)]
    chromas = dict((n, parse_note(n).chroma) for n in notes)

    options = []
    for base_octave in octaves:
        for inversion in inversions:
            octave = base_octave
            voicing = []
            for index, name in enumerate(inversion):
                # Wrapped past the pitch-class origin
                if index > 0 and chromas[name] < chromas[inversion[index - 1]]:
                    octave += 1
                voicing.append(name + str(octave))
            options.append(voicing)
    return options


def voicing_distance(previous, candidate):
    """
    Total semitone motion between two voicings.

    Voices are paired by index, wrapping the shorter one, so a triad can
    be compared with a seventh chord. This is a greedy approximation of
    voice-leading distance, not a minimum-cost matching.
    """
    old = [note_midi(n) for n in previous]
    new = [note_midi(n) for n in candidate]
    total = 0
    for i in range(max(len(old), len(new))):
        total += abs(new[i % len(new)] - old[i % len(old)])
    return total


def best_voicing(previous, options):
    """Option with the least motion from previous; first one wins ties."""
    best = options[0]
    best_distance = None
    for option in options:
        distance = voicing_distance(previous, option)
        if best_distance is None or distance < best_distance:
            best = option
            best_distance = distance
    return best


def ascending_voicing(notes, start_octave=VoicingRange.FALLBACK_OCTAVE):
    """
    Stateless fallback: stack the notes upward from start_octave,
    bumping the octave whenever a note would not sound above the last.
    """
    octave = start_octave
    voicing = []
    previous_midi = None
    for name in notes:
        candidate = name + str(octave)
        if previous_midi is not None and note_midi(candidate) <= previous_midi:
            octave += 1
            candidate = name + str(octave)
        voicing.append(candidate)
        previous_midi = note_midi(candidate)
    return voicing


def bass_note(voicing, root):
    """Chord root one octave below the lowest voiced note."""
    lowest = min((parse_note(n) for n in voicing), key=lambda n: n.midi)
    return root + str(lowest.octave - 1)


class VoicingEngine:
    """
    Chooses concrete pitches for chords, remembering the last voicing
    as the reference for the next search.
    """

    def __init__(self, enabled=True, octaves=VoicingRange.CANDIDATE_OCTAVES,
                 ceiling=VoicingRange.CEILING_NOTE):
        self.enabled = enabled
        self.octaves = tuple(octaves)
        self.ceiling_midi = note_midi(ceiling)
        self.last_voicing = None

    def select(self, notes, reference=None):
        """
        Pick the octave assignment for a chord's pitch classes.

        Args:
            notes: Pitch classes of the chord
            reference: Voicing to move from (defaults to last_voicing)

        Returns:
            List of pitched names (bass not included)
        """
        notes = list(notes)
        if not self.enabled:
            voicing = ascending_voicing(notes)
        else:
            if reference is None:
                if self.last_voicing is None:
                    self.last_voicing = [n + str(VoicingRange.SEED_OCTAVE) for n in notes]
                reference = self.last_voicing
            options = generate_voicing_options(notes, self.octaves)
            in_range = [
                option for option in options
                if all(note_midi(n) <= self.ceiling_midi for n in option)
            ]
            voicing = best_voicing(reference, in_range or options)
        self.last_voicing = voicing
        return voicing

    def voice(self, notes, root, reference=None):
        """
        Full voicing for playback: selected notes plus bass, simplified.

        Returns:
            (voiced, full) - voiced is the raw selection, full is the
            simplified note list including the bass
        """
        voiced = self.select(notes, reference)
        full = voiced + [bass_note(voiced, root)]
        return voiced, [simplify(n) for n in full]

"""
Polyphonic note ledger.

Tracks the notes sounding for each slot (a scale degree 0-6 or the
lattice slot) and sends the synthesizer only the notes that change. A
note is released only when no other active slot still needs it. Notes
are compared by pitch, so C#4 held by one slot keeps Db4 from another.
"""
import logging
from collections import namedtuple

from .music_theory import note_midi

log = logging.getLogger(__name__)

NoteDelta = namedtuple("NoteDelta", ["attacked", "released"])

EMPTY_DELTA = NoteDelta((), ())


def _pitches(notes):
    return {note_midi(n) for n in notes}


class NoteLedger:
    """Per-slot active notes with attack/release diffing."""

    def __init__(self, synth):
        """
        Args:
            synth: SynthHAL implementation
        """
        self.synth = synth
        self._voicings = {}

    def active_slots(self):
        return list(self._voicings.keys())

    def notes_for(self, slot):
        return list(self._voicings.get(slot, ()))

    def is_active(self, slot):
        return slot in self._voicings

    def is_empty(self):
        return not self._voicings

    def sounding_notes(self):
        """Union of all slots' notes, one spelling per pitch."""
        by_pitch = {}
        for notes in self._voicings.values():
            for n in notes:
                by_pitch.setdefault(note_midi(n), n)
        return set(by_pitch.values())

    def _pitches_needed_by_others(self, slot):
        needed = set()
        for other, notes in self._voicings.items():
            if other != slot:
                needed.update(_pitches(notes))
        return needed

    def start(self, slot, voicing):
        """
        Make slot sound exactly `voicing`.

        Returns:
            NoteDelta of what was sent; empty when nothing changed
        """
        current = self._voicings.get(slot, [])
        still_needed = self._pitches_needed_by_others(slot)
        current_pitches = _pitches(current)
        keep = _pitches(voicing) | still_needed
        to_release = tuple(n for n in current if note_midi(n) not in keep)
        to_attack = tuple(n for n in voicing if note_midi(n) not in current_pitches)

        if to_release:
            self.synth.release(list(to_release))
        if to_attack:
            self.synth.attack(list(to_attack))
        self._voicings[slot] = list(voicing)

        if to_attack or to_release:
            log.debug("slot %r: +%s -%s", slot, list(to_attack), list(to_release))
        return NoteDelta(to_attack, to_release)

    def stop(self, slot):
        """
        Silence a slot, keeping notes other slots still hold.

        Returns:
            NoteDelta with the released notes (empty if slot was idle)
        """
        notes = self._voicings.pop(slot, None)
        if notes is None:
            return EMPTY_DELTA
        still_needed = self._pitches_needed_by_others(slot)
        to_release = tuple(n for n in notes if note_midi(n) not in still_needed)
        if to_release:
            self.synth.release(list(to_release))
        log.debug("slot %r stopped: -%s", slot, list(to_release))
        return NoteDelta((), to_release)

    def stop_all(self):
        """Release everything that is sounding."""
        notes = sorted(self.sounding_notes())
        self._voicings.clear()
        if notes:
            self.synth.release(notes)
        return NoteDelta((), tuple(notes))

"""
Main Harmony Machine Application.
Ties together the chord model, modifiers, voicing, note ledger, lattice
and hardware. Platform-independent - receives hardware through
dependency injection.
"""
import logging

from .chord_engine import ChordEngine, apply_overrides, lattice_chord
from .constants import Defaults, KeyMap, Lattice, Layout, Modifier, Music, Timing
from .errors import InvalidConfigError
from .lattice import LatticeKeyboard, cell_at
from .modifiers import ModifierState
from .note_ledger import EMPTY_DELTA, NoteLedger
from .scheduler import Scheduler
from .theremin import ThereminVoice, theremin_ticks
from .ui_state import Event, UIState
from .voicing import VoicingEngine

log = logging.getLogger(__name__)


class HarmonyMachineApp:
    """
    Main application class for the Harmony Machine.
    Owns all session state; every mutation goes through its methods.
    """

    def __init__(self, hardware, root=Defaults.ROOT, scale_name=Defaults.SCALE,
                 voice_leading=Defaults.VOICE_LEADING, layout=Defaults.LAYOUT):
        """
        Initialize the Harmony Machine.

        Args:
            hardware: HardwarePort instance with all HAL implementations
            root: Key root pitch class
            scale_name: Scale type
            voice_leading: Minimal-motion voicing on/off
            layout: Initial input layout
        """
        # Hardware (injected)
        self.hw = hardware

        # Business logic
        self.chord_engine = ChordEngine(root=root, scale_name=scale_name)
        self.scheduler = Scheduler(hardware.clock)
        self.modifiers = ModifierState(self.scheduler, on_change=self._on_modifiers_changed)
        self.voicing = VoicingEngine(enabled=voice_leading)
        self.ledger = NoteLedger(hardware.synth)
        self.lattice = LatticeKeyboard(hardware.clock)
        self.theremin = ThereminVoice(hardware.lead_synth)

        # UI State
        self.ui_state = UIState(layout)

        self.audio_started = False

        # Raw voicing per slot, the reference when a held chord is refreshed
        self._slot_voicings = {}
        # (root, is_minor) of the sounding lattice triad
        self._lattice_request = None

        self._setup_event_handlers()

        # Initial display update
        self._update_display()

    def _setup_event_handlers(self):
        """Connect UI state events to hardware actions."""

        def on_chord_started(data):
            self.hw.display.show_chord(data["label"], data["notes"])

        def on_chord_stopped(data):
            if self.ledger.is_empty():
                self.hw.display.clear()

        def on_modifiers_changed(data):
            self.hw.display.show_modifiers(data["active"])

        def on_key_changed(data):
            self.hw.display.show_scale(data["scale_name"], data["ticks"])

        def on_layout_changed(data):
            self.hw.display.show_layout(data["layout"])

        def on_lattice_changed(data):
            self.hw.display.show_lattice(
                data["row"], data["col"], data["shift_active"], data["shift_locked"]
            )

        # Register handlers
        self.ui_state.subscribe(Event.CHORD_STARTED, on_chord_started)
        self.ui_state.subscribe(Event.CHORD_STOPPED, on_chord_stopped)
        self.ui_state.subscribe(Event.MODIFIERS_CHANGED, on_modifiers_changed)
        self.ui_state.subscribe(Event.KEY_CHANGED, on_key_changed)
        self.ui_state.subscribe(Event.LAYOUT_CHANGED, on_layout_changed)
        self.ui_state.subscribe(Event.LATTICE_CHANGED, on_lattice_changed)

    def _update_display(self):
        """Update display with current state."""
        display = self.hw.display
        display.show_scale(
            self.chord_engine.get_scale_display_name(),
            theremin_ticks(self.chord_engine.root, self.chord_engine.scale_name),
        )
        display.show_layout(self.ui_state.layout)
        display.show_modifiers(self.modifiers.active_names())
        if self.ui_state.chord_label:
            display.show_chord(self.ui_state.chord_label, self.ui_state.voiced_notes)
        else:
            display.clear()
        self.ui_state.clear_display_dirty()

    @property
    def current_display(self):
        return self.ui_state.current_display

    def start_audio(self):
        """Arm the audio path; playing commands are ignored until then."""
        if self.audio_started:
            return
        self.audio_started = True
        log.info("audio started")

    # ------------------------------------------------------------------
    # Chords
    # ------------------------------------------------------------------

    def _play(self, slot, chord, reference=None):
        chord = apply_overrides(chord, self.modifiers.quality(), self.modifiers.transposition())
        voiced, notes = self.voicing.voice(chord.notes, chord.root, reference)
        delta = self.ledger.start(slot, notes)
        self._slot_voicings[slot] = voiced
        self.ui_state.set_chord_display(chord.label, notes)
        log.debug("play %r: %s %s", slot, chord.label, notes)
        self.ui_state.emit(
            Event.CHORD_STARTED,
            {"slot": slot, "chord": chord, "label": chord.label, "notes": notes, "delta": delta},
        )
        return delta

    def _stop(self, slot):
        if not self.ledger.is_active(slot):
            return EMPTY_DELTA
        delta = self.ledger.stop(slot)
        self._slot_voicings.pop(slot, None)
        if self.ledger.is_empty():
            self.ui_state.clear_chord_display()
        self.ui_state.emit(Event.CHORD_STOPPED, {"slot": slot, "delta": delta})
        return delta

    def start_chord(self, degree):
        """
        Play (or re-voice) the chord on a scale degree.

        Args:
            degree: Scale degree 0-6

        Returns:
            NoteDelta sent to the synthesizer
        """
        if not self.audio_started:
            return EMPTY_DELTA
        chord = self.chord_engine.get_chord(degree)
        return self._play(degree, chord, self._slot_voicings.get(degree))

    def stop_chord(self, degree):
        """Release a scale degree's chord, keeping notes other slots hold."""
        self.scheduler.cancel(self._start_timer_key(degree))
        if not self.audio_started:
            return EMPTY_DELTA
        return self._stop(degree)

    @staticmethod
    def _start_timer_key(degree):
        return ("chord_start", degree)

    def queue_chord_start(self, degree):
        """
        Start a chord after the note debounce, so a modifier pressed just
        after the note key still shapes the attack.
        """
        self.chord_engine.get_chord(degree)
        self.scheduler.call_later(
            self._start_timer_key(degree),
            Timing.NOTE_START_DEBOUNCE_MS,
            lambda: self.start_chord(degree),
        )

    def refresh_active_chords(self):
        """
        Re-voice every sounding slot for the current key and modifiers.
        Each slot moves from its own sounding voicing.

        Returns:
            Dict of slot -> NoteDelta
        """
        if not self.audio_started:
            return {}
        deltas = {}
        for slot in self.ledger.active_slots():
            reference = self._slot_voicings.get(slot)
            if slot == Lattice.SLOT:
                if self._lattice_request is None:
                    continue
                root, is_minor = self._lattice_request
                deltas[slot] = self._play(slot, lattice_chord(root, is_minor), reference)
            else:
                deltas[slot] = self._play(slot, self.chord_engine.get_chord(slot), reference)
        return deltas

    # ------------------------------------------------------------------
    # Modifiers and key
    # ------------------------------------------------------------------

    def set_modifier(self, name, active):
        self.modifiers.set_modifier(name, active)

    def _on_modifiers_changed(self):
        self.ui_state.emit(Event.MODIFIERS_CHANGED, {"active": self.modifiers.active_names()})
        self.refresh_active_chords()

    def _on_key_changed(self):
        log.debug("key -> %s", self.chord_engine.get_scale_display_name())
        self.ui_state.emit(
            Event.KEY_CHANGED,
            {
                "root": self.chord_engine.root,
                "scale_name": self.chord_engine.get_scale_display_name(),
                "ticks": theremin_ticks(self.chord_engine.root, self.chord_engine.scale_name),
            },
        )
        self.refresh_active_chords()

    def change_global_key(self, direction):
        """Move the key up (+1) or down (-1) a semitone."""
        root = self.chord_engine.change_key(direction)
        self._on_key_changed()
        return root

    def set_key_by_index(self, index):
        root = self.chord_engine.set_key_by_index(index)
        self._on_key_changed()
        return root

    def set_root(self, root):
        self.chord_engine.root = root
        self._on_key_changed()

    def set_scale(self, scale_name):
        self.chord_engine.scale_name = scale_name
        self._on_key_changed()

    def next_scale(self):
        name = self.chord_engine.next_scale()
        self._on_key_changed()
        return name

    def prev_scale(self):
        name = self.chord_engine.prev_scale()
        self._on_key_changed()
        return name

    def toggle_voice_leading(self):
        self.voicing.enabled = not self.voicing.enabled
        self.ui_state.emit(Event.VOICE_LEADING_CHANGED, {"enabled": self.voicing.enabled})
        return self.voicing.enabled

    # ------------------------------------------------------------------
    # Layout and lattice
    # ------------------------------------------------------------------

    def set_layout(self, layout):
        """
        Switch input layout. Leaving the lattice silences and resets it;
        entering it stops held and pending scale-degree chords, whose note
        keys become column keys there.
        """
        if layout not in Layout.ALL:
            raise InvalidConfigError("Unknown layout: %r" % (layout,))
        if layout == Layout.TONNETZ:
            if self.ui_state.layout != Layout.TONNETZ:
                for degree in range(Music.SCALE_DEGREES):
                    self.stop_chord(degree)
        else:
            self.stop_lattice_triad()
            self.lattice.reset()
        self.ui_state.set_layout(layout)

    def cycle_layout(self):
        self.set_layout(self.ui_state.next_layout())
        return self.ui_state.layout

    def play_lattice_triad(self, root, is_minor):
        """Play a major or minor triad on the lattice slot."""
        if not self.audio_started:
            return EMPTY_DELTA
        self._lattice_request = (root, is_minor)
        return self._play(Lattice.SLOT, lattice_chord(root, is_minor), None)

    def play_lattice_cell(self, f, t, is_minor):
        """Play the triangle at (f, t); nothing happens off the board."""
        cell = cell_at(f, t)
        if cell is None:
            return EMPTY_DELTA
        return self.play_lattice_triad(cell.root, is_minor)

    def stop_lattice_triad(self):
        self._lattice_request = None
        if not self.audio_started:
            return EMPTY_DELTA
        return self._stop(Lattice.SLOT)

    def _apply_lattice_state(self):
        """Re-examine held/locked lattice keys and update the sound."""
        if self.ui_state.layout != Layout.TONNETZ:
            return
        triad = self.lattice.active_triad()
        if triad is not None and self.audio_started:
            log.debug("lattice -> %s", triad)
            self.play_lattice_cell(triad.f, triad.t, triad.is_minor)
        else:
            self.stop_lattice_triad()
        self.ui_state.emit(
            Event.LATTICE_CHANGED,
            {
                "row": self.lattice.active_row,
                "col": self.lattice.active_col,
                "shift_active": self.lattice.shift_active,
                "shift_locked": self.lattice.shift_locked,
            },
        )

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key_down(self, key, repeat=False):
        """
        Route a key press.

        Args:
            key: Key name as reported by the platform ("q", "Shift", "Enter")
            repeat: True for auto-repeat events, which are ignored

        Returns:
            True if the key was used
        """
        if repeat:
            return False
        ui = self.ui_state

        if ui.key_change_pending:
            ui.key_change_pending = False
            if key in KeyMap.KEY_CHANGE_COMBO:
                self.set_key_by_index(KeyMap.KEY_CHANGE_COMBO[key])
                return True
        if key in KeyMap.KEY_CHANGE_PREFIX:
            ui.key_change_pending = True
            return True

        if key == KeyMap.START_AUDIO_KEY and not self.audio_started:
            self.start_audio()
            return True

        if ui.layout == Layout.TONNETZ and self.lattice.key_down(key):
            self._apply_lattice_state()
            return True

        # Hidden hotkey: major modifier + "+"/"-" shifts the key
        if self.modifiers.is_active(Modifier.MAJOR):
            if key in KeyMap.KEY_UP:
                self.change_global_key(1)
                return True
            if key in KeyMap.KEY_DOWN:
                self.change_global_key(-1)
                return True

        handled = False
        for name in KeyMap.modifiers_for(key):
            self.set_modifier(name, True)
            handled = True

        if key in KeyMap.NOTE_KEYS:
            if self.audio_started:
                self.queue_chord_start(int(key) - 1)
            handled = True
        return handled

    def handle_key_up(self, key):
        """Route a key release. Returns True if the key was used."""
        if self.ui_state.layout == Layout.TONNETZ and self.lattice.key_up(key):
            self._apply_lattice_state()
            return True

        handled = False
        for name in KeyMap.modifiers_for(key):
            self.set_modifier(name, False)
            handled = True

        if key in KeyMap.KEY_CHANGE_PREFIX:
            self.ui_state.key_change_pending = False
            handled = True

        if key in KeyMap.NOTE_KEYS:
            # Cancels a start still inside the debounce window
            self.stop_chord(int(key) - 1)
            handled = True
        return handled

    # ------------------------------------------------------------------
    # Theremin
    # ------------------------------------------------------------------

    def theremin_start(self, position):
        if not self.audio_started:
            return
        self.theremin.start(position)

    def theremin_move(self, position):
        self.theremin.move(position)

    def theremin_stop(self):
        self.theremin.stop()

    def orientation_start(self):
        if not self.audio_started:
            return
        self.theremin.start_orientation()

    def orientation_sample(self, beta):
        self.theremin.orientation_sample(beta)

    def orientation_stop(self):
        self.theremin.stop_orientation()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def update(self):
        """
        Main update loop - call this frequently.
        Fires due timers and pushes output changes.
        """
        self.scheduler.run_due()

        if self.ui_state.display_dirty:
            self._update_display()

        self.hw.update_outputs()

    def cleanup(self):
        """Clean shutdown - silence everything and clear the display."""
        self.scheduler.clear()
        self.ledger.stop_all()
        self._slot_voicings = {}
        self._lattice_request = None
        self.theremin.stop()
        self.modifiers.reset()
        self.lattice.reset()
        self.ui_state.clear_chord_display()

        self.hw.display.clear()
        self.hw.display.update()
        self.ui_state.clear_display_dirty()

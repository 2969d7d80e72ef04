"""
UI State management - platform independent.
Manages presentation state and provides event-driven architecture.
"""
from .constants import Layout
from .errors import InvalidConfigError


class Event:
    """Event type constants for state changes."""

    CHORD_STARTED = "chord_started"
    CHORD_STOPPED = "chord_stopped"
    MODIFIERS_CHANGED = "modifiers_changed"
    KEY_CHANGED = "key_changed"
    LAYOUT_CHANGED = "layout_changed"
    LATTICE_CHANGED = "lattice_changed"
    VOICE_LEADING_CHANGED = "voice_leading_changed"


class UIState:
    """
    Centralized UI state container.
    All presentation state lives here, separate from the music logic.
    """

    def __init__(self, layout=Layout.TONNETZ):
        """
        Args:
            layout: Initial input layout
        """
        if layout not in Layout.ALL:
            raise InvalidConfigError("Unknown layout: %r" % (layout,))
        self.layout = layout

        # What the player sees for the sounding chord
        self.chord_label = ""
        self.voiced_notes = []

        # "k" pressed, waiting for the key-change digit
        self.key_change_pending = False

        self.display_dirty = True

        # Event subscribers
        self._subscribers = {}

    def subscribe(self, event_type, callback):
        """
        Subscribe to an event type.

        Args:
            event_type: Event type constant from Event class
            callback: Function to call when event occurs, receives data dict
        """
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type, callback):
        """Remove a callback from an event type."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(callback)
            except ValueError:
                pass

    def emit(self, event_type, data=None):
        """Emit an event to all subscribers."""
        if event_type in self._subscribers:
            for callback in self._subscribers[event_type]:
                callback(data)

    def set_chord_display(self, label, voiced_notes):
        self.chord_label = label
        self.voiced_notes = list(voiced_notes)
        self.display_dirty = True

    def clear_chord_display(self):
        self.chord_label = ""
        self.voiced_notes = []
        self.display_dirty = True

    def set_layout(self, layout):
        """Set a specific layout. Returns True if it changed."""
        if layout not in Layout.ALL:
            raise InvalidConfigError("Unknown layout: %r" % (layout,))
        if layout == self.layout:
            return False
        self.layout = layout
        self.display_dirty = True
        self.emit(Event.LAYOUT_CHANGED, {"layout": layout})
        return True

    def next_layout(self):
        """Layout after the current one in cycle order."""
        current_idx = Layout.ALL.index(self.layout)
        return Layout.ALL[(current_idx + 1) % len(Layout.ALL)]

    @property
    def current_display(self):
        """Read-only snapshot for presentation."""
        return {"chord_label": self.chord_label, "voiced_notes": list(self.voiced_notes)}

    def clear_display_dirty(self):
        """Mark display as updated."""
        self.display_dirty = False

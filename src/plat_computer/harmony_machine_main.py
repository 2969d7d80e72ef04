#!/usr/bin/env python3
"""
Desktop entry point for Harmony Machine.

Plays a short scripted progression through the keyboard surface on a
MIDI output:
    python -m plat_computer.harmony_machine_main [port name]
"""
import logging
import sys
import time

from harmony_machine import HarmonyMachineApp
from harmony_machine.constants import Layout

from plat_computer.hal_computer import create_computer_hardware_port, list_outputs

# (time ms, "down" | "up", key)
DEMO_EVENTS = [
    (0, "down", "Enter"),
    (0, "up", "Enter"),
    # I
    (100, "down", "1"),
    (900, "up", "1"),
    # vi
    (1000, "down", "6"),
    (1800, "up", "6"),
    # ii7: minor + dominant on degree 2
    (1900, "down", "w"),
    (1950, "down", "e"),
    (2000, "down", "2"),
    (2800, "up", "2"),
    (2850, "up", "e"),
    (2850, "up", "w"),
    # V7, after the minor modifier has decayed
    (3100, "down", "e"),
    (3110, "down", "5"),
    (3900, "up", "5"),
    (3950, "up", "e"),
    # I, held while the key moves up a semitone (major + "+")
    (4200, "down", "1"),
    (4600, "down", "q"),
    (4650, "down", "+"),
    (4700, "up", "+"),
    (4800, "up", "q"),
    (5400, "up", "1"),
]


def run_demo(app, clock, events=DEMO_EVENTS):
    """Feed timed key events into the app, polling it like a main loop."""
    start = clock.ticks_ms()
    pending = list(events)
    while pending:
        elapsed = clock.ticks_ms() - start
        while pending and pending[0][0] <= elapsed:
            _, action, key = pending.pop(0)
            if action == "down":
                app.handle_key_down(key)
            else:
                app.handle_key_up(key)
        app.update()
        time.sleep(0.001)  # ~1000Hz update rate
    # Let decays and releases settle
    settle_until = clock.ticks_ms() + 500
    while clock.ticks_ms() < settle_until:
        app.update()
        time.sleep(0.001)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Initializing Harmony Machine...")
    if not list_outputs():
        return 1

    port_name = argv[0] if argv else None
    hardware, port = create_computer_hardware_port(port_name)

    app = HarmonyMachineApp(hardware, root="C", scale_name="major", layout=Layout.QWERTY)

    print("========================================")
    print("  HARMONY MACHINE DEMO")
    print("========================================")
    print("Keys 1-7: chords I-VII")
    print("w/e/d/z/a/s/x/c/v/q: chord quality")
    print("f/r: root down/up a semitone")
    print("========================================")

    try:
        run_demo(app, hardware.clock)
    except KeyboardInterrupt:
        print("\nStopped by user.")
    finally:
        app.cleanup()
        port.close()
        print("Harmony Machine stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

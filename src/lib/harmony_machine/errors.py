"""
Exceptions raised by the Harmony Machine core.
"""


class HarmonyMachineError(Exception):
    """Base error for the Harmony Machine library."""


class InvalidConfigError(HarmonyMachineError, ValueError):
    """Raised for caller bugs: unknown scale, root, modifier, chord symbol or degree."""

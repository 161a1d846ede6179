class HarnessError(Exception):
    """Base class for harness failures."""

class EngineBoundaryError(HarnessError):
    """
    The matching engine failed or answered outside its contract.
    Fatal to the current script run.
    """

class UnrecognizedEventError(EngineBoundaryError):
    """The engine returned an event with no known variant tag."""

class CommandParseError(EngineBoundaryError):
    """A command text could not be decoded by the engine."""

class UnknownCommandError(HarnessError):
    """Operator input that does not map to a playback control."""

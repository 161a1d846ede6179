"""
Operator Controls

Maps operator input lines to playback controls.
"""
import math
from typing import Callable, Dict
from ..core.errors import UnknownCommandError
from ..core.logger import get_logger

logger = get_logger("OperatorControls")

def _set_delay(controller, args):
    if len(args) != 1:
        raise UnknownCommandError("delay needs one value in milliseconds")
    try:
        delay_ms = float(args[0])
    except ValueError:
        raise UnknownCommandError(f"Invalid delay: {args[0]!r}")
    if not math.isfinite(delay_ms) or delay_ms < 0:
        raise UnknownCommandError(f"Delay must be a finite value >= 0: {args[0]!r}")
    try:
        controller.set_delay(delay_ms)
    except ValueError as e:
        raise UnknownCommandError(str(e))

COMMANDS: Dict[str, Callable] = {
    "pause": lambda c, _: c.pause(),
    "resume": lambda c, _: c.resume(),
    "toggle": lambda c, _: c.toggle_pause(),
    "step": lambda c, _: c.step(),
    "faster": lambda c, _: c.faster(),
    "slower": lambda c, _: c.slower(),
    "clear": lambda c, _: c.clear(),
    "delay": _set_delay,
}

ALIASES = {
    "p": "pause",
    "r": "resume",
    "": "toggle",   # bare Enter
    "space": "toggle",
    "s": "step",
    "n": "step",
    "+": "faster",
    "-": "slower",
    "c": "clear",
    "d": "delay",
}

def apply_command(controller, line: str) -> str:
    """
    Applies one operator line such as 'p', 'step' or 'delay 250'.
    Returns the canonical control name.
    """
    words = line.strip().split()
    name = words[0].lower() if words else ""
    name = ALIASES.get(name, name)
    handler = COMMANDS.get(name)
    if handler is None:
        raise UnknownCommandError(f"Unknown control: {line.strip()!r}")
    handler(controller, words[1:])
    logger.debug("control_applied", control=name)
    return name

def help_text() -> str:
    return (
        "controls: p=pause r=resume <enter>=toggle s=step +/-=faster/slower "
        "d <ms>=delay c=clear"
    )

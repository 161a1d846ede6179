"""
Order Book Conformance Harness

Scripted replay of order commands against a matching engine, with
pass/fail verdicts and a depth view of the book.
"""
from .context import HarnessConfig
from .script_parser import parse
from .classifier import classify, classify_quote
from .depth import render
from .playback import PlaybackController, PlaybackState, PlaybackStatus
from .verdict import ScriptVerdict, VerdictStatus

__all__ = [
    "HarnessConfig",
    "parse",
    "classify",
    "classify_quote",
    "render",
    "PlaybackController",
    "PlaybackState",
    "PlaybackStatus",
    "ScriptVerdict",
    "VerdictStatus",
]

"""
Event Classifier

Turns an engine response into a pass/fail verdict record.
"""
from typing import Optional
from ..core.clock import Clock
from ..core.errors import UnrecognizedEventError
from ..core.types import (
    ENGINE_EVENT_TYPES,
    Filled,
    PartiallyFilled,
    Quote,
    QuoteAssertion,
    Rejected,
    VerdictRecord,
)

BBO_TYPE = "bbo"
BBO_MATCHED = "BBO matched"
BBO_MISMATCH = "BBO mismatch"

def outcome_string(event) -> str:
    """
    Canonical actual outcome: '<variant>,<id>' plus ',<filled_qty>' for fills.
    The variant name is lowercased as is, so PartiallyFilled becomes 'partiallyfilled'.
    """
    if not isinstance(event, ENGINE_EVENT_TYPES):
        raise UnrecognizedEventError(f"Unrecognized engine event: {event!r}")
    tag = event.kind.lower()
    if isinstance(event, (Filled, PartiallyFilled)):
        return f"{tag},{event.id},{event.filled_qty}"
    return f"{tag},{event.id}"

def classify(event, expected_token: Optional[str] = None, line: Optional[int] = None) -> VerdictRecord:
    """
    Success iff the expected token is present and contained in the actual outcome.
    A missing token is recorded as an unverified failure, not skipped.
    """
    actual = outcome_string(event)
    success = expected_token is not None and expected_token in actual

    message = None
    if isinstance(event, Rejected):
        message = event.message
    elif expected_token is None:
        message = "No expected outcome given"

    return VerdictRecord(
        type=event.kind.lower(),
        id=event.id,
        filled_qty=getattr(event, "filled_qty", None),
        message=message,
        success=success,
        expected=expected_token,
        actual=actual,
        line=line,
        timestamp_us=Clock.now_epoch_us(),
    )

def _format_quote(quote: Quote) -> str:
    return ",".join("" if v is None else str(v) for v in quote)

def classify_quote(actual: Quote, expected: Quote, line: Optional[int] = None) -> VerdictRecord:
    """
    Success iff all four best bid/offer fields compare equal.
    """
    actual = Quote(*actual)
    expected = Quote(*expected)
    success = actual == expected
    return VerdictRecord(
        type=BBO_TYPE,
        success=success,
        message=BBO_MATCHED if success else BBO_MISMATCH,
        expected=_format_quote(expected),
        actual=_format_quote(actual),
        line=line,
        timestamp_us=Clock.now_epoch_us(),
    )

def classify_malformed(directive: QuoteAssertion) -> VerdictRecord:
    """
    Failed record for an assertion the parser could not read.
    """
    return VerdictRecord(
        type=BBO_TYPE,
        success=False,
        message=directive.error,
        line=directive.line,
        timestamp_us=Clock.now_epoch_us(),
    )

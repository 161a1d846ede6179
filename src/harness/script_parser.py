"""
Script Parser

Turns conformance script text into directives, one per line.
Never raises: hand-written scripts degrade to best-effort directives.
"""
from typing import List, Optional, Tuple
from ..core.types import AnyDirective, Blank, CancelCommand, OrderCommand, QuoteAssertion

RESULT_DELIMITER = "-"
CANCEL_MARKER = "cancel"
BBO_MARKER = "bbo"
QUOTE_FIELDS = 4

def split_expectation(line: str) -> Tuple[str, Optional[str]]:
    """
    Splits once on the first delimiter into (order, expected).
    expected is None when the line has no delimiter.
    """
    order, sep, result = line.partition(RESULT_DELIMITER)
    return order, (result if sep else None)

def parse_quote(line: str, line_no: int, offset: int, length: Optional[int] = None) -> QuoteAssertion:
    span = dict(line=line_no, offset=offset, length=len(line) if length is None else length)
    _, sep, values = line.partition(BBO_MARKER + RESULT_DELIMITER)
    tokens = values.split(",") if sep else []
    if len(tokens) != QUOTE_FIELDS:
        return QuoteAssertion(
            **span,
            error=f"Expected {QUOTE_FIELDS} comma separated values after 'bbo-', got {line!r}",
        )
    try:
        bid_qty, bid_price, ask_qty, ask_price = (int(t.strip()) for t in tokens)
    except ValueError:
        return QuoteAssertion(**span, error=f"Non-integer value in quote assertion {line!r}")
    return QuoteAssertion(
        **span,
        expected_bid_qty=bid_qty,
        expected_bid_price=bid_price,
        expected_ask_qty=ask_qty,
        expected_ask_price=ask_price,
    )

def parse_line(line: str, line_no: int, offset: int, length: Optional[int] = None) -> AnyDirective:
    """
    length overrides the span length when the caller stripped characters from line.
    """
    span = dict(line=line_no, offset=offset, length=len(line) if length is None else length)
    if not line:
        return Blank(**span)

    order, expected = split_expectation(line)
    if CANCEL_MARKER in order:
        return CancelCommand(**span, raw_text=order, expected_token=expected)
    if BBO_MARKER in order:
        return parse_quote(line, line_no, offset, span["length"])
    return OrderCommand(**span, raw_text=order, expected_token=expected)

def parse(script_text: str) -> List[AnyDirective]:
    """
    Parses a whole script. Directive order is line order; empty lines are kept
    as Blank so character offsets stay aligned with the source text.
    """
    directives: List[AnyDirective] = []
    offset = 0
    for line_no, line in enumerate(script_text.split("\n"), start=1):
        # Spans count the raw line, carriage return included
        directives.append(parse_line(line.rstrip("\r"), line_no, offset, len(line)))
        offset += len(line) + 1
    return directives

def is_executable(directive: AnyDirective) -> bool:
    """
    True when the directive produces an engine call and a verdict.
    """
    if isinstance(directive, Blank):
        return False
    if isinstance(directive, (CancelCommand, OrderCommand)):
        return bool(directive.raw_text)
    return True

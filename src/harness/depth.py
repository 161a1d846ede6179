"""
Depth Aggregator

Builds the display view of the book from an engine snapshot: cumulative
quantities, spread, and padding to a stable number of rows.
"""
from typing import List, Sequence
from ..core.types import DEFAULT_DEPTH_ROWS, BookLevel, BookSnapshot, BookView, PriceLevel

def accumulate(levels: Sequence[PriceLevel]) -> List[BookLevel]:
    """
    Cumulative quantity scanning best to worst.
    """
    rows: List[BookLevel] = []
    total = 0
    for level in levels:
        total += level.qty
        rows.append(BookLevel(price=level.price, qty=level.qty, total=total))
    return rows

def spread(snapshot: BookSnapshot) -> int:
    """
    Best ask minus best bid; 0 while either side is empty.
    """
    if not snapshot.bids or not snapshot.asks:
        return 0
    return snapshot.asks[0].price - snapshot.bids[0].price

def pad(rows: List[BookLevel], depth: int) -> List[BookLevel]:
    return rows + [BookLevel() for _ in range(depth - len(rows))]

def render(snapshot: BookSnapshot, min_rows: int = DEFAULT_DEPTH_ROWS) -> BookView:
    """
    Pure transform; the same snapshot always renders the same view.

    Asks come out worst to best so the best ask sits next to the spread row,
    bids stay best to worst.
    """
    depth = max(min_rows, len(snapshot.asks), len(snapshot.bids))
    asks = pad(accumulate(snapshot.asks), depth)
    bids = pad(accumulate(snapshot.bids), depth)
    return BookView(
        bids=bids,
        asks=list(reversed(asks)),
        spread=spread(snapshot),
    )

"""
Reference Matching Engine

In-process limit order book with price-time priority.
Executes commands serially; integer prices and quantities only.
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple
from ..core.errors import CommandParseError
from ..core.logger import get_logger
from ..core.types import (
    BookSnapshot,
    Cancelled,
    EngineEvent,
    Fill,
    Filled,
    Open,
    PartiallyFilled,
    PriceLevel,
    Quote,
    Rejected,
    Side,
)
from .interface import MatchingEngine

logger = get_logger("OrderBook")

# Reject messages
INVALID_ORDER_NUMBER = "INVALID_ORDER_NUMBER"      # sequence number did not increase
LIQUIDITY_NOT_AVAILABLE = "LIQUIDITY_NOT_AVAILABLE"

class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"
    IOC = "ioc"
    FOK = "fok"
    CANCEL = "cancel"

# Minimum field count per order type, sequence number included
MIN_FIELDS = {
    OrderType.MARKET: 5,
    OrderType.LIMIT: 6,
    OrderType.IOC: 6,
    OrderType.FOK: 6,
}

@dataclass(frozen=True)
class OrderRequest:
    """
    Decoded command text.
    """
    id: int
    order_type: OrderType
    user_id: int = 0
    side: Side = Side.BID
    qty: int = 0
    price: Optional[int] = None

@dataclass
class RestingOrder:
    id: int
    user_id: int
    side: Side
    price: int
    qty: int

@dataclass(frozen=True)
class Trade:
    """
    Aggregate of the fills produced by one taker order.
    """
    total_qty: int
    avg_price: float
    last_price: int
    last_qty: int

def _parse_int(field: str) -> int:
    try:
        value = int(field)
    except ValueError:
        raise CommandParseError(f"Invalid integer: {field!r}")
    if value < 0:
        raise CommandParseError(f"Negative value not allowed: {field!r}")
    return value

def _parse_side(field: str) -> Side:
    try:
        return Side(field.lower())
    except ValueError:
        raise CommandParseError(f"Invalid side: {field!r}")

def parse_command(text: str) -> OrderRequest:
    """
    Decodes '<seq>,<user>,<type>,<side>,<qty>[,<price>]' or '<id>,cancel'.
    'cancel,<id>' is accepted as well.
    """
    fields = [f.strip() for f in text.split(",")]
    if len(fields) < 2:
        raise CommandParseError(f"Invalid fields count: {text!r}")

    lowered = [f.lower() for f in fields]
    if "cancel" in lowered:
        others = [f for f, low in zip(fields, lowered) if low != "cancel" and f]
        if not others:
            raise CommandParseError(f"Cancel without order id: {text!r}")
        return OrderRequest(id=_parse_int(others[0]), order_type=OrderType.CANCEL)

    try:
        order_type = OrderType(lowered[2]) if len(fields) > 2 else None
    except ValueError:
        order_type = None
    if order_type is None or order_type is OrderType.CANCEL:
        raise CommandParseError(f"Invalid order type: {text!r}")

    if len(fields) < MIN_FIELDS[order_type]:
        raise CommandParseError(f"Invalid fields count for {order_type.value}: {text!r}")

    return OrderRequest(
        id=_parse_int(fields[0]),
        user_id=_parse_int(fields[1]),
        order_type=order_type,
        side=_parse_side(fields[3]),
        qty=_parse_int(fields[4]),
        price=None if order_type is OrderType.MARKET else _parse_int(fields[5]),
    )

class OrderBook(MatchingEngine):
    """
    Single-instrument order book.

    Invariant: order sequence numbers strictly increase; cancels do not consume one.
    """
    def __init__(self, track_stats: bool = False):
        self.track_stats = track_stats
        self.reset()

    def reset(self):
        self._last_sequence = 0
        self._orders: Dict[int, RestingOrder] = {}
        self._bids: Dict[int, Deque[int]] = {}
        self._asks: Dict[int, Deque[int]] = {}
        self.traded_volume = 0
        self.last_trade: Optional[Trade] = None

    # --- Engine boundary ---

    def submit(self, command: str) -> EngineEvent:
        request = parse_command(command)
        if request.order_type is OrderType.CANCEL:
            return self._cancel(request.id)
        event = self.execute(request)
        logger.debug("order_executed", command=command, outcome=event.kind, id=request.id)
        return event

    def cancel(self, command: str) -> EngineEvent:
        request = parse_command(command)
        if request.order_type is not OrderType.CANCEL:
            raise CommandParseError(f"Not a cancel command: {command!r}")
        return self._cancel(request.id)

    def quote(self) -> Quote:
        bid_qty = bid_price = ask_qty = ask_price = 0
        if self._bids:
            bid_price = max(self._bids)
            bid_qty = self._level_qty(self._bids, bid_price)
        if self._asks:
            ask_price = min(self._asks)
            ask_qty = self._level_qty(self._asks, ask_price)
        return Quote(bid_qty, bid_price, ask_qty, ask_price)

    def snapshot(self) -> BookSnapshot:
        return BookSnapshot(
            bids=[PriceLevel(price=p, qty=self._level_qty(self._bids, p)) for p in sorted(self._bids, reverse=True)],
            asks=[PriceLevel(price=p, qty=self._level_qty(self._asks, p)) for p in sorted(self._asks)],
        )

    def last_sequence(self) -> int:
        return self._last_sequence

    # --- Execution ---

    def execute(self, request: OrderRequest) -> EngineEvent:
        """
        Executes one decoded order, returning immediately the resulting event.
        """
        if request.order_type is OrderType.CANCEL:
            return self._cancel(request.id)

        if self._last_sequence >= request.id:
            return Rejected(id=request.id, message=INVALID_ORDER_NUMBER)
        self._last_sequence = request.id

        fills, remaining = self._match(request.id, request.side, request.qty, request.price)

        if request.order_type is OrderType.FOK and remaining > 0:
            # All or nothing: the book is left untouched
            return Rejected(id=request.id, message=LIQUIDITY_NOT_AVAILABLE)

        self._finalize(fills)
        filled_qty = request.qty - remaining

        if request.order_type is OrderType.LIMIT:
            if remaining > 0:
                self._rest(request, remaining)
            if not fills:
                return Open(id=request.id)
        elif not fills:
            return Rejected(id=request.id, message=LIQUIDITY_NOT_AVAILABLE)

        if self.track_stats:
            self._record_trade(fills, filled_qty)

        if remaining > 0:
            return PartiallyFilled(id=request.id, filled_qty=filled_qty, fills=fills)
        return Filled(id=request.id, filled_qty=filled_qty, fills=fills)

    def _cancel(self, order_id: int) -> EngineEvent:
        order = self._orders.pop(order_id, None)
        if order is not None:
            levels = self._side_levels(order.side)
            queue = levels[order.price]
            queue.remove(order_id)
            if not queue:
                del levels[order.price]
        # Unknown ids are acknowledged as cancelled too
        return Cancelled(id=order_id)

    def _match(
        self, taker_id: int, side: Side, qty: int, limit_price: Optional[int]
    ) -> Tuple[List[Fill], int]:
        """
        Walks the opposite side best price first without mutating it.
        Returns the fills and the unfilled remainder.
        """
        opposite = self._side_levels(side.opposite())
        prices = sorted(opposite) if side is Side.BID else sorted(opposite, reverse=True)
        remaining = qty
        fills: List[Fill] = []

        for price in prices:
            if remaining == 0:
                break
            if limit_price is not None:
                if side is Side.BID and price > limit_price:
                    break
                if side is Side.ASK and price < limit_price:
                    break
            for maker_id in opposite[price]:
                if remaining == 0:
                    break
                maker = self._orders[maker_id]
                traded = min(remaining, maker.qty)
                fills.append(Fill(
                    taker_id=taker_id,
                    maker_id=maker_id,
                    qty=traded,
                    price=price,
                    taker_side=side,
                    total_fill=traded == maker.qty,
                ))
                remaining -= traded

        return fills, remaining

    def _finalize(self, fills: List[Fill]):
        """Applies fills to the resting makers."""
        for fill in fills:
            maker = self._orders[fill.maker_id]
            if fill.total_fill:
                levels = self._side_levels(maker.side)
                queue = levels[maker.price]
                queue.remove(maker.id)
                if not queue:
                    del levels[maker.price]
                del self._orders[maker.id]
            else:
                maker.qty -= fill.qty

    def _rest(self, request: OrderRequest, qty: int):
        self._orders[request.id] = RestingOrder(
            id=request.id,
            user_id=request.user_id,
            side=request.side,
            price=request.price,
            qty=qty,
        )
        self._side_levels(request.side).setdefault(request.price, deque()).append(request.id)

    def _record_trade(self, fills: List[Fill], filled_qty: int):
        self.traded_volume += filled_qty
        last = fills[-1]
        self.last_trade = Trade(
            total_qty=filled_qty,
            avg_price=sum(f.price * f.qty for f in fills) / filled_qty,
            last_price=last.price,
            last_qty=last.qty,
        )

    def _side_levels(self, side: Side) -> Dict[int, Deque[int]]:
        return self._bids if side is Side.BID else self._asks

    def _level_qty(self, levels: Dict[int, Deque[int]], price: int) -> int:
        return sum(self._orders[i].qty for i in levels[price])

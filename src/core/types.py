from enum import Enum
from typing import Annotated, List, Literal, NamedTuple, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

# Constants
DEFAULT_DEPTH_ROWS = 30

class Side(str, Enum):
    BID = "bid"
    ASK = "ask"

    def opposite(self) -> "Side":
        return Side.ASK if self is Side.BID else Side.BID

# --- Script directives ---

class Directive(BaseModel):
    """
    One parsed unit of a script line.
    Carries its source span so the playback cursor can track character offsets.
    """
    model_config = ConfigDict(frozen=True)

    line: int    # 1-based line number
    offset: int  # character offset of the line start
    length: int  # line length, excluding the line break

class Blank(Directive):
    kind: Literal["blank"] = "blank"

class CancelCommand(Directive):
    kind: Literal["cancel"] = "cancel"
    raw_text: str
    expected_token: Optional[str] = None

class OrderCommand(Directive):
    """
    Order submission. raw_text has no sequence number; it is assigned at dispatch.
    """
    kind: Literal["order"] = "order"
    raw_text: str
    expected_token: Optional[str] = None

class QuoteAssertion(Directive):
    kind: Literal["bbo"] = "bbo"
    expected_bid_qty: Optional[int] = None
    expected_bid_price: Optional[int] = None
    expected_ask_qty: Optional[int] = None
    expected_ask_price: Optional[int] = None
    error: Optional[str] = None  # set when the assertion tokens could not be parsed

    @property
    def expected(self) -> "Quote":
        return Quote(
            self.expected_bid_qty,
            self.expected_bid_price,
            self.expected_ask_qty,
            self.expected_ask_price,
        )

AnyDirective = Union[Blank, CancelCommand, OrderCommand, QuoteAssertion]

# --- Engine events ---

class Fill(BaseModel):
    """Single match between the incoming (taker) order and a resting (maker) order."""
    model_config = ConfigDict(frozen=True)

    taker_id: int
    maker_id: int
    qty: int
    price: int
    taker_side: Side
    total_fill: bool  # maker order fully consumed

class Open(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Open"] = "Open"
    id: int

class Cancelled(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Cancelled"] = "Cancelled"
    id: int

class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Rejected"] = "Rejected"
    id: int
    message: Optional[str] = None

class Filled(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["Filled"] = "Filled"
    id: int
    filled_qty: int
    fills: List[Fill] = Field(default_factory=list)

class PartiallyFilled(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["PartiallyFilled"] = "PartiallyFilled"
    id: int
    filled_qty: int
    fills: List[Fill] = Field(default_factory=list)

EngineEvent = Annotated[
    Union[Open, Cancelled, Rejected, Filled, PartiallyFilled],
    Field(discriminator="kind"),
]

ENGINE_EVENT_TYPES = (Open, Cancelled, Rejected, Filled, PartiallyFilled)

# --- Quotes and book ---

class Quote(NamedTuple):
    bid_qty: Optional[int]
    bid_price: Optional[int]
    ask_qty: Optional[int]
    ask_price: Optional[int]

class PriceLevel(BaseModel):
    """Raw level from an engine snapshot: aggregate quantity resting at a price."""
    model_config = ConfigDict(frozen=True)

    price: int
    qty: int

class BookSnapshot(BaseModel):
    """
    Full book as reported by the engine. Both sides are ordered best first.
    """
    model_config = ConfigDict(frozen=True)

    bids: List[PriceLevel] = Field(default_factory=list)
    asks: List[PriceLevel] = Field(default_factory=list)

class BookLevel(BaseModel):
    """
    Display row. total is the cumulative quantity at this price or better.
    All fields are None on padding rows.
    """
    model_config = ConfigDict(frozen=True)

    price: Optional[int] = None
    qty: Optional[int] = None
    total: Optional[int] = None

    @property
    def is_blank(self) -> bool:
        return self.price is None

class BookView(BaseModel):
    model_config = ConfigDict(frozen=True)

    bids: List[BookLevel] = Field(default_factory=list)  # best to worst
    asks: List[BookLevel] = Field(default_factory=list)  # worst to best
    spread: int = 0

# --- Verdicts ---

class VerdictRecord(BaseModel):
    """
    Outcome of one executed directive. Immutable once appended to the event log.
    """
    model_config = ConfigDict(frozen=True)

    type: str
    success: bool
    id: Optional[int] = None
    filled_qty: Optional[int] = None
    message: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    line: Optional[int] = None
    timestamp_us: int = 0

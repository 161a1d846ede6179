from abc import ABC, abstractmethod
from typing import Any, Dict
from pydantic import TypeAdapter, ValidationError
from ..core.errors import UnrecognizedEventError
from ..core.types import BookSnapshot, EngineEvent, Quote

_EVENT_ADAPTER = TypeAdapter(EngineEvent)

class MatchingEngine(ABC):
    """
    Abstract Base Class for the engine under test.
    The harness is its only caller and never has two calls in flight.
    """

    @abstractmethod
    def submit(self, command: str) -> EngineEvent:
        """
        Executes an order command. The text already starts with its sequence number.
        """
        pass

    @abstractmethod
    def cancel(self, command: str) -> EngineEvent:
        pass

    @abstractmethod
    def quote(self) -> Quote:
        """
        Best bid/offer as (bid qty, bid price, ask qty, ask price).
        """
        pass

    @abstractmethod
    def snapshot(self) -> BookSnapshot:
        pass

    @abstractmethod
    def last_sequence(self) -> int:
        pass

    @abstractmethod
    def reset(self):
        """
        Drops all resting orders and sequence state.
        """
        pass

def event_from_tagged(payload: Dict[str, Any]) -> EngineEvent:
    """
    Decodes an externally tagged event such as {"Open": {"id": 1}}.
    Exactly one key must be populated.
    """
    if not isinstance(payload, dict) or len(payload) != 1:
        raise UnrecognizedEventError(f"Expected exactly one event tag, got {payload!r}")

    (tag, body), = payload.items()
    if body is not None and not isinstance(body, dict):
        raise UnrecognizedEventError(f"Malformed body for event {tag!r}: {body!r}")
    if tag == "Canceled":
        # Older engine builds spell it this way
        tag = "Cancelled"
    try:
        return _EVENT_ADAPTER.validate_python({**(body or {}), "kind": tag})
    except ValidationError as e:
        raise UnrecognizedEventError(f"Unrecognized event {tag!r}: {e}") from e

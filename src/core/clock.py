import time
from typing import Final

MICROS_PER_MILLI: Final[int] = 1_000

class Clock:
    """
    Time source for playback pacing and verdict timestamps.
    """

    @staticmethod
    def now_us() -> int:
        """
        Returns current monotonic time in microseconds.
        Use for measuring delays, never for display.
        """
        return time.monotonic_ns() // 1000

    @staticmethod
    def now_epoch_us() -> int:
        """
        Returns current epoch time in microseconds.
        Stamped on verdict records for the operator.
        """
        return time.time_ns() // 1000

    @staticmethod
    def remaining_ms(started_us: int, delay_ms: float) -> float:
        """
        Milliseconds left of a delay that began at started_us (monotonic).
        Never negative.
        """
        elapsed_ms = (Clock.now_us() - started_us) / MICROS_PER_MILLI
        return max(0.0, delay_ms - elapsed_ms)

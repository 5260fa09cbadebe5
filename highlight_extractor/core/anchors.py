from datetime import datetime
from typing import Callable, Optional

# --- Block reference anchors ---

def format_timestamp(moment: datetime) -> str:
    """Return `moment` as YYYYMMDDHHMMSS (14 digits, zero padded)."""
    return moment.strftime("%Y%m%d%H%M%S")


class AnchorGenerator:
    """Hands out anchors of the form <timestamp><2-digit counter>.

    The counter restarts at 1 whenever the second changes, so anchors are
    distinct within one second for up to 99 calls. Nothing is persisted:
    two processes extracting in the same second can produce the same anchor.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self.last_timestamp: Optional[str] = None
        self.counter = 0

    def next_anchor(self) -> str:
        stamp = format_timestamp(self._clock())
        if self.last_timestamp is None or stamp != self.last_timestamp:
            self.counter = 1
            self.last_timestamp = stamp
        else:
            self.counter += 1
        return f"{stamp}{self.counter:02d}"

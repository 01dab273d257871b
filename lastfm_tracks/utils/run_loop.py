import itertools
import time
from typing import Callable, Dict, Tuple

from tqdm import tqdm


class RunLoopTimer:
    """
    A single-threaded timer for terminal use.

    Callbacks registered with call_later() are run one at a time by run(),
    which waits for each with a countdown bar.
    """

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress
        self._pending: Dict[int, Tuple[float, Callable]] = {}
        self._ids = itertools.count(1)

    def call_later(self, delay: float, callback: Callable) -> int:
        handle = next(self._ids)
        self._pending[handle] = (time.monotonic() + delay, callback)
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run(self) -> None:
        """Run pending callbacks until there are none left."""
        while self._pending:
            handle = min(self._pending, key=lambda h: self._pending[h][0])
            due, callback = self._pending[handle]
            self._wait_until(due)
            del self._pending[handle]
            callback()

    def _wait_until(self, due: float) -> None:
        remaining = due - time.monotonic()
        if remaining <= 0:
            return
        seconds = int(remaining)
        if self.show_progress and seconds:
            for _ in tqdm(range(seconds), desc="Next update", unit="s", leave=False):
                time.sleep(1)
        else:
            time.sleep(seconds)
        time.sleep(max(0.0, due - time.monotonic()))

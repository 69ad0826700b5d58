"""Fixed-interval polling loop with graceful shutdown."""

import logging
import signal
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PollSummary:
    polls: int = 0
    errors: int = 0


class Poller:
    """Run `tick` every `interval_seconds` until stopped.

    A stop request (SIGINT/SIGTERM or `stop()`) never interrupts a tick in
    progress; it only prevents the next one. Exceptions from a tick are logged
    and the loop keeps going.
    """

    def __init__(self, name: str, tick: Callable[[], object], interval_seconds: float):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.name = name
        self.tick = tick
        self.interval_seconds = interval_seconds
        self._stop_requested = False

    @property
    def stopping(self) -> bool:
        return self._stop_requested

    def stop(self) -> None:
        self._stop_requested = True

    def run_once(self, summary: PollSummary | None = None) -> PollSummary:
        summary = summary or PollSummary()
        summary.polls += 1
        try:
            self.tick()
        except Exception as e:
            summary.errors += 1
            logger.error(f"[{self.name}] poll failed: {e}", exc_info=True)
        return summary

    def run(self, max_polls: int | None = None) -> PollSummary:
        summary = PollSummary()
        logger.info(f"[{self.name}] started, interval={self.interval_seconds}s")
        with self._signal_handlers():
            while not self._stop_requested:
                self.run_once(summary)
                if max_polls is not None and summary.polls >= max_polls:
                    break
                self._sleep_with_stop(self.interval_seconds)
        logger.info(f"[{self.name}] stopped after {summary.polls} polls")
        return summary

    def _sleep_with_stop(self, seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while not self._stop_requested and time.monotonic() < deadline:
            time.sleep(min(0.1, max(0.0, deadline - time.monotonic())))

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            logger.info(f"[{self.name}] {signal.Signals(signum).name} received, finishing current poll")
            self.stop()

        try:
            signal.signal(signal.SIGINT, _handler)
            signal.signal(signal.SIGTERM, _handler)
            installed = True
        except ValueError:
            # Only the main thread may install handlers.
            installed = False
        try:
            yield
        finally:
            if installed:
                signal.signal(signal.SIGINT, original_sigint)
                signal.signal(signal.SIGTERM, original_sigterm)

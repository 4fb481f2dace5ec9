"""
Retry/Backoff Controller

Drives the attempts for a single page. Quota errors make the controller wait
and try again without using up the page's attempt budget; every other
per-page error is counted, and the page fails once the budget is spent.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, TypeVar

from rich.console import Console
from rich.markup import escape

from .errors import ConfigurationError, PageExhausted, RunAborted, ServiceQuotaExhausted


console = Console()

T = TypeVar("T")


class AttemptState(str, Enum):
    ATTEMPTING = "attempting"
    WAITING_FOR_QUOTA = "waiting_for_quota"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PageOutcome:
    """How a page's processing went."""
    page_index: int
    state: AttemptState = AttemptState.ATTEMPTING
    attempts: int = 1
    quota_waits: int = 0
    waited_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)
    result: object = None


class RetryController:
    """Runs a page attempt until it succeeds or the attempt budget is spent."""

    def __init__(
        self,
        max_attempts: int = 3,
        default_quota_delay: float = 20.0,
        sleep: Optional[Callable[[float], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.default_quota_delay = default_quota_delay
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep or self._wait

    def _wait(self, seconds: float):
        """Sleep that returns early (and aborts) when the run is cancelled."""
        if self.cancel_event.wait(seconds):
            raise RunAborted("Run aborted during quota wait")

    def _check_cancelled(self):
        if self.cancel_event.is_set():
            raise RunAborted("Run aborted")

    def run(self, page_index: int, attempt: Callable[[], T]) -> PageOutcome:
        """
        Call ``attempt`` until it succeeds.

        Args:
            page_index: Page being processed (for messages)
            attempt: Zero-argument callable doing the whole page attempt

        Returns:
            PageOutcome in SUCCEEDED state, with attempt's return value in ``result``

        Raises:
            PageExhausted: after max_attempts counted failures
            ConfigurationError: passed through untouched
            RunAborted: if the cancel event is set
        """
        outcome = PageOutcome(page_index=page_index)
        last_error: Optional[BaseException] = None

        while True:
            self._check_cancelled()
            outcome.state = AttemptState.ATTEMPTING
            try:
                outcome.result = attempt()
            except (ConfigurationError, RunAborted):
                raise
            except ServiceQuotaExhausted as e:
                delay = e.retry_after if e.retry_after is not None else self.default_quota_delay
                outcome.state = AttemptState.WAITING_FOR_QUOTA
                outcome.quota_waits += 1
                console.print(
                    f"  [yellow]⏳ API quota exhausted. Waiting {delay:g}s before retrying page {page_index}...[/]"
                )
                self._sleep(delay)
                outcome.waited_seconds += delay
                continue
            except Exception as e:
                last_error = e
                outcome.errors.append(f"{type(e).__name__}: {e}")
                console.print(
                    f"  [red]✗ Page {page_index}, attempt {outcome.attempts}/{self.max_attempts} failed:[/] {escape(str(e))}"
                )
                if outcome.attempts >= self.max_attempts:
                    outcome.state = AttemptState.FAILED
                    raise PageExhausted(page_index, outcome.attempts, last_error, outcome=outcome) from e
                outcome.attempts += 1
                console.print("  [yellow]→ Retrying...[/]")
                continue

            outcome.state = AttemptState.SUCCEEDED
            return outcome

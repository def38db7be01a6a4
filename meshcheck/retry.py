"""Retrying a check until it passes, with buffered logging of each attempt."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

__all__ = [
    "RetryOptions",
    "AttemptResult",
    "options",
    "attempt",
    "until_success",
]

LogFunc = Callable[[str], Any]
CheckFunc = Callable[[LogFunc], Any]


@dataclass(frozen=True)
class RetryOptions:
    """How often and how quickly to retry. ``delay`` is in seconds."""

    max_attempts: int = 60
    delay: float = 1.0
    log_attempts: bool = True

    def with_max_attempts(self, max_attempts: int) -> RetryOptions:
        return replace(self, max_attempts=max_attempts)

    def with_delay(self, delay: float) -> RetryOptions:
        return replace(self, delay=delay)

    def with_log_attempts(self, log_attempts: bool) -> RetryOptions:
        return replace(self, log_attempts=log_attempts)


_DEFAULT_OPTIONS = RetryOptions()


def options() -> RetryOptions:
    """Return the default retry options."""
    return _DEFAULT_OPTIONS


@dataclass
class AttemptResult:
    """Outcome of one attempt: its return value or error, and what it logged."""

    value: Any = None
    error: Optional[BaseException] = None
    messages: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def flush_log(self, log: LogFunc) -> None:
        """Pass the buffered messages to ``log`` and empty the buffer."""
        for message in self.messages:
            log(message)
        self.messages.clear()


def attempt(func: CheckFunc) -> AttemptResult:
    """Run ``func`` once, capturing its failure and buffering what it logs.

    ``func`` is called with a log function; it fails by raising.
    """
    result = AttemptResult()
    try:
        result.value = func(result.messages.append)
    except Exception as exc:  # any failure of the check counts as a failed attempt
        result.error = exc
        result.messages.append(f"attempt failed: {exc}")
    return result


def _format_delay(delay: float) -> str:
    return f"{delay:g}s"


def until_success(
    func: CheckFunc,
    options: Optional[RetryOptions] = None,
    log: LogFunc = print,
    log_failed_attempts: bool = True,
) -> Any:
    """Call ``func`` until it stops raising, up to ``options.max_attempts`` times.

    Returns the value of the successful call. The last attempt runs with
    ``log`` directly and its exception propagates to the caller.
    """
    opts = options if options is not None else _DEFAULT_OPTIONS
    max_attempts = opts.max_attempts
    start = time.monotonic()

    for i in range(max_attempts):
        last_attempt = i == max_attempts - 1
        buffered: Optional[AttemptResult] = None

        if last_attempt:
            try:
                value = func(log)
            except Exception:
                if opts.log_attempts and log_failed_attempts:
                    log(f"Last attempt ({i + 1}/{max_attempts}) failed.")
                raise
        else:
            buffered = attempt(func)
            if log_failed_attempts:
                buffered.flush_log(log)
            if buffered.failed:
                if opts.log_attempts and log_failed_attempts:
                    if opts.delay == _DEFAULT_OPTIONS.delay:
                        log(f"--- Attempt {i + 1}/{max_attempts} failed. Retrying...")
                    else:
                        log(
                            f"--- Attempt {i + 1}/{max_attempts} failed. "
                            f"Retrying in {_format_delay(opts.delay)}..."
                        )
                time.sleep(opts.delay)
                continue
            value = buffered.value

        if log_failed_attempts:
            if i > 0 and opts.log_attempts:
                elapsed = time.monotonic() - start
                log(
                    f"--- Attempt {i + 1}/{max_attempts} successful; "
                    f"total time: {elapsed:.2f}s"
                )
        elif buffered is not None:
            buffered.flush_log(log)

        if max_attempts > 1:
            percentage = i * 100 // max_attempts
            if percentage >= 90:
                log(
                    "WARNING: This test is is almost certainly flaky since it required "
                    "more than 90% of the maximum retry count to succeed. Consider "
                    "increasing the maximum retry count to prevent flakiness."
                )
            elif percentage >= 75:
                log(
                    "WARNING: This test may be flaky since it required more than 75% "
                    "of the maximum retry count to succeed. Consider increasing the "
                    "maximum retry count to prevent flakiness."
                )
        return value

    return None
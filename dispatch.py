from __future__ import annotations

import threading
from typing import Any, Callable

from api import NetworkError

Job = Callable[[], Any]
SuccessHandler = Callable[[Any], None]
ErrorHandler = Callable[[NetworkError], None]


class ImmediateDispatcher:
    """Runs each request inline and reports the outcome before returning."""

    def submit(self, job: Job, on_success: SuccessHandler, on_error: ErrorHandler) -> None:
        try:
            result = job()
        except NetworkError as error:
            on_error(error)
            return
        on_success(result)


class ThreadDispatcher:
    """Runs each request on a worker thread.

    Outcomes are handed to ``schedule`` (for Tk, ``widget.after(0, ...)``-style)
    so handlers always run on the UI thread.
    """

    def __init__(self, schedule: Callable[[Callable[[], None]], Any]):
        self._schedule = schedule

    def submit(self, job: Job, on_success: SuccessHandler, on_error: ErrorHandler) -> None:
        threading.Thread(
            target=self._run, args=(job, on_success, on_error), daemon=True
        ).start()

    def _run(self, job: Job, on_success: SuccessHandler, on_error: ErrorHandler) -> None:
        try:
            result = job()
        except NetworkError as error:
            self._schedule(lambda error=error: on_error(error))
            return
        self._schedule(lambda: on_success(result))

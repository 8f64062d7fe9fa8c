"""
Sequential batch execution with per-record failure handling.

A batch processes its input records strictly in order, one at a time. Each
record yields exactly one :class:`ResultRecord`. What happens when a record
fails depends on the :class:`FailurePolicy` chosen at the start of the run:
``ISOLATE`` turns the failure into an error record and moves on, ``ABORT``
stops the run and raises :class:`~jupiter_relay.adapters.base.BatchAbortedError`
annotated with the failing index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from logging import LoggerAdapter
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...core.logging import get_logger, log_progress
from ..base import AdapterError, BatchAbortedError


class FailurePolicy(str, Enum):
    ISOLATE = "isolate"
    ABORT = "abort"

    @classmethod
    def from_flag(cls, continue_on_fail: bool) -> "FailurePolicy":
        return cls.ISOLATE if continue_on_fail else cls.ABORT


@dataclass(slots=True)
class ResultRecord:
    """
    Outcome for one input record.

    Exactly one of ``payload`` (success) or ``error`` (isolated failure) is
    meaningful. ``index`` is the zero-based position of the originating record.
    """

    index: int
    payload: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"index": self.index, "json": {"error": self.error}}
        return {"index": self.index, "json": self.payload}


@dataclass(slots=True)
class BatchRunner:
    """Run ``step(index)`` for every record under a fixed failure policy."""

    policy: FailurePolicy = FailurePolicy.ABORT
    logger: LoggerAdapter = field(default_factory=lambda: get_logger(__name__), repr=False)

    def run(self, records: Iterable[Any], step: Callable[[int], Any]) -> List[ResultRecord]:
        results: List[ResultRecord] = []
        for index, _record in enumerate(records):
            try:
                payload = step(index)
            except AdapterError as exc:
                if self.policy is FailurePolicy.ISOLATE:
                    log_progress(
                        self.logger,
                        "Record failed; recorded as error",
                        phase="batch",
                        step=str(index),
                        status="isolated",
                        level=logging.WARNING,
                        extra={"error": str(exc)},
                    )
                    results.append(ResultRecord(index=index, error=str(exc)))
                    continue
                log_progress(
                    self.logger,
                    "Record failed; aborting batch",
                    phase="batch",
                    step=str(index),
                    status="aborted",
                    level=logging.ERROR,
                    extra={"error": str(exc)},
                )
                raise BatchAbortedError(index, exc, results) from exc

            results.append(ResultRecord(index=index, payload=payload))
            log_progress(self.logger, "Record processed", phase="batch", step=str(index), status="ok", level=logging.DEBUG)

        failed = sum(1 for record in results if not record.ok)
        log_progress(
            self.logger,
            "Batch complete",
            phase="batch",
            status="done",
            result=f"{len(results) - failed} ok, {failed} failed",
        )
        return results

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import pydantic

from taskledger.engine.actions import process_advance
from taskledger.engine.queries import run_query
from taskledger.engine.results import Accepted, ActionResult, Rejected, ValidationError
from taskledger.models.rollup import AdvanceData, FinishStatus, InspectData, RollupRequest
from taskledger.observability import get_json_logger, get_metrics, use_request_context
from taskledger.rollup.codec import PayloadDecodeError, hex_to_str
from taskledger.rollup.interface import RollupServer
from taskledger.state.store import LedgerState

KNOWN_REQUEST_TYPES = ("advance_state", "inspect_state")


class Dispatcher:
    """Routes rollup requests into the ledger engine and publishes the outcome.

    - ``advance_state``: accepted actions emit a notice, rejected ones a report
    - ``inspect_state``: always answered with a report and accepted
    - Requests are handled strictly one at a time, in delivery order
    """

    def __init__(self, server: RollupServer, state: LedgerState | None = None) -> None:
        self._server = server
        self._state = state if state is not None else LedgerState()
        self._status: FinishStatus = "accept"

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def last_status(self) -> FinishStatus:
        return self._status

    def handle(self, request: RollupRequest) -> FinishStatus:
        metrics = get_metrics()
        label = request.request_type if request.request_type in KNOWN_REQUEST_TYPES else "unknown"
        metrics.increment("requests", {"request_type": label})
        if request.request_type == "advance_state":
            return self._handle_advance(request.data)
        if request.request_type == "inspect_state":
            return self._handle_inspect(request.data)
        get_json_logger("taskledger.dispatcher").warning(
            "unknown request type",
            extra={"event": "request_unknown", "request_type": request.request_type},
        )
        return self._settle("reject")

    def _settle(self, status: FinishStatus) -> FinishStatus:
        # Called before output is posted; run() finishes with this status even
        # when the post fails.
        self._status = status
        return status

    def _handle_advance(self, data: dict[str, Any]) -> FinishStatus:
        logger = get_json_logger("taskledger.dispatcher")
        metrics = get_metrics()
        try:
            advance = AdvanceData.model_validate(data)
        except pydantic.ValidationError as exc:
            logger.warning(
                "malformed advance envelope",
                extra={"event": "advance_malformed", "kv": {"errors": exc.error_count()}},
            )
            metrics.increment("advance_rejected", {"error_kind": ValidationError.kind})
            self._settle("reject")
            self._server.add_report("Malformed advance request.")
            return "reject"

        meta = advance.metadata
        with use_request_context("advance_state", meta.input_index, meta.msg_sender):
            result: ActionResult
            try:
                text = hex_to_str(advance.payload)
            except PayloadDecodeError as exc:
                result = Rejected(ValidationError(str(exc)))
            else:
                result = process_advance(
                    self._state, text, sender=meta.msg_sender, timestamp=meta.timestamp
                )

            if isinstance(result, Accepted):
                self._settle("accept")
                self._server.add_notice(result.message)
                logger.info(
                    "advance accepted",
                    extra={"event": "advance_accepted", "kv": {"notice": result.message}},
                )
                metrics.increment("advance_accepted")
                if result.reward:
                    metrics.increment("rewards_credited", amount=result.reward)
                return "accept"

            self._settle("reject")
            self._server.add_report(result.message)
            logger.info(
                "advance rejected",
                extra={
                    "event": "advance_rejected",
                    "error_kind": result.error.kind,
                    "kv": {"report": result.message},
                },
            )
            metrics.increment("advance_rejected", {"error_kind": result.error.kind})
            return "reject"

    def _handle_inspect(self, data: dict[str, Any]) -> FinishStatus:
        logger = get_json_logger("taskledger.dispatcher")
        try:
            inspect = InspectData.model_validate(data)
        except pydantic.ValidationError:
            self._settle("accept")
            self._server.add_report("Malformed inspect request.")
            return "accept"

        sender = inspect.metadata.msg_sender if inspect.metadata else None
        with use_request_context("inspect_state", None, sender):
            try:
                text = hex_to_str(inspect.payload)
            except PayloadDecodeError as exc:
                response = str(exc)
            else:
                response = run_query(self._state, text, sender=sender)
            self._settle("accept")
            self._server.add_report(response)
            logger.info("inspect handled", extra={"event": "inspect_handled"})
            get_metrics().increment("inspect_handled")
        return "accept"

    def poll_once(self) -> bool:
        """Finish the previous request and handle the next one, if any.

        Returns True when a request was handled.
        """
        request = self._server.finish(self._status)
        if request is None:
            return False
        self._status = self.handle(request)
        return True

    def run(
        self,
        *,
        should_stop: Callable[[], bool],
        min_sleep: float = 0.05,
        max_sleep: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Poll until ``should_stop`` returns True.

        Transport errors are logged and retried; idle polls back off exponentially.
        """
        logger = get_json_logger("taskledger.dispatcher")
        sleep_seconds = min_sleep
        while not should_stop():
            try:
                handled = self.poll_once()
            except (httpx.HTTPError, ValueError):
                logger.exception("poll failed", extra={"event": "poll_error"})
                get_metrics().increment("poll_errors")
                handled = False
            if handled:
                sleep_seconds = min_sleep
                continue
            logger.debug("no pending rollup request", extra={"event": "poll_idle"})
            sleep(sleep_seconds)
            sleep_seconds = min(max_sleep, sleep_seconds * 2)


__all__ = ["KNOWN_REQUEST_TYPES", "Dispatcher"]

"""Credit-gated generation session with linear undo/redo history."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple

from studio.services.account_service import AccountError, AccountStore
from studio.services.notifier import Notifier
from studio.session.errors import ErrorKind, classify_exception, classify_message

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HistoryEntry:
    """One recorded result and the request that produced it."""

    result_reference: str
    request_description: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class BackendResponse:
    """Normalized payload returned by a remote generation call."""

    success: bool
    result_reference: Optional[str] = None
    data: Any = None
    error: Optional[str] = None


@dataclass(slots=True)
class SubmitOutcome:
    """Result of ``GenerationSession.submit``."""

    reference: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    credits_deducted: bool = False
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None


RemoteCall = Callable[[], Awaitable[Any]]

ORIGINAL_DESCRIPTION = "original"


def _unpack_payload(payload: Any) -> Tuple[Optional[str], Any, Optional[str]]:
    """Return ``(reference, data, failure_message)`` for any supported payload."""
    if isinstance(payload, BackendResponse):
        if not payload.success:
            return None, payload.data, payload.error or "The remote service reported a failure."
        return payload.result_reference, payload.data, None
    if isinstance(payload, Mapping):
        if not payload.get("success", False):
            return None, payload.get("data"), str(payload.get("error") or "The remote service reported a failure.")
        reference = payload.get("result_reference") or payload.get("imageUrl")
        return (str(reference) if reference else None), payload.get("data"), None
    if isinstance(payload, str):
        return payload or None, None, None
    return None, payload, None


class GenerationSession:
    """Undo/redo-tracked sequence of generation results for one editing view.

    Every submission is checked against the account's credits before the
    remote call runs, and credits are only deducted after the call returned a
    usable result. Only one submission may be outstanding at a time.
    """

    def __init__(
        self,
        account: AccountStore,
        notifier: Optional[Notifier] = None,
        initial_reference: Optional[str] = None,
        label: str = "PHIXO",
    ) -> None:
        self.account = account
        self.notifier = notifier
        self.label = label
        self.error: Optional[str] = None
        self._history: List[HistoryEntry] = []
        self._current_index = -1
        self._initial_reference: Optional[str] = None
        self._in_flight = threading.Lock()
        self.reset(initial_reference)

    # State ------------------------------------------------------------------
    def reset(self, initial_reference: Optional[str] = None) -> None:
        """Drop the history and start over from ``initial_reference``."""
        self._initial_reference = initial_reference
        self._history = []
        self._current_index = -1
        self.error = None
        if initial_reference:
            self._history.append(HistoryEntry(initial_reference, ORIGINAL_DESCRIPTION))
            self._current_index = 0

    @property
    def history(self) -> List[HistoryEntry]:
        return list(self._history)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def credits(self) -> int:
        return self.account.get_credits()

    @property
    def is_loading(self) -> bool:
        return self._in_flight.locked()

    def current_result(self) -> Optional[str]:
        """Return the reference under the cursor, or the initial reference."""
        if self._current_index < 0:
            return self._initial_reference
        return self._history[self._current_index].result_reference

    def original_result(self) -> Optional[str]:
        if not self._history:
            return self._initial_reference
        return self._history[0].result_reference

    def can_undo(self) -> bool:
        return self._current_index > 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._history) - 1

    def undo(self) -> Optional[str]:
        """Step back one entry; returns None when already at the start."""
        if not self.can_undo():
            return None
        self._current_index -= 1
        self._notify("Action undone", "Back to the previous state.")
        return self.current_result()

    def redo(self) -> Optional[str]:
        """Step forward one entry; returns None when already at the end."""
        if not self.can_redo():
            return None
        self._current_index += 1
        self._notify("Action redone", "Forward to the next state.")
        return self.current_result()

    # Submission -------------------------------------------------------------
    async def submit(self, request_description: str, cost: int, remote_call: RemoteCall) -> SubmitOutcome:
        """Run ``remote_call`` if credits allow and record its result."""
        if cost < 1:
            raise ValueError("cost must be at least 1")

        if not self._in_flight.acquire(blocking=False):
            return self._reject(
                ErrorKind.ALREADY_IN_PROGRESS,
                "A generation is already running. Wait until it has finished.",
                record=False,
            )
        try:
            available = self.account.get_credits()
            if available < cost:
                return self._reject(
                    ErrorKind.INSUFFICIENT_CREDITS,
                    f"You need {cost} credit{'s' if cost > 1 else ''} for this action, "
                    f"you have {available}.",
                )

            self.error = None
            self._notify(f"{self.label} is working...", f'Running "{request_description}"')
            logger.info("Submitting %r (cost=%s, credits=%s)", request_description, cost, available)

            try:
                payload = await remote_call()
            except Exception as exc:  # noqa: BLE001
                kind = classify_exception(exc)
                logger.warning("Remote call for %r failed (%s): %s", request_description, kind.value, exc)
                return self._reject(kind, str(exc) or exc.__class__.__name__)

            reference, data, failure = _unpack_payload(payload)
            if failure is not None:
                return self._reject(classify_message(failure), failure)
            if not reference:
                return self._reject(
                    ErrorKind.INVALID_RESULT,
                    f"{self.label} did not return a usable image.",
                )

            self._append(reference, request_description)
            deducted = self._charge(cost)
            self._notify(f"{self.label} edit succeeded", f'"{request_description}" completed.')
            return SubmitOutcome(
                reference=reference,
                message=f'"{request_description}" completed.',
                credits_deducted=deducted,
                data=data,
            )
        finally:
            self._in_flight.release()

    # Internal helpers ---------------------------------------------------------
    def _append(self, reference: str, description: str) -> None:
        del self._history[self._current_index + 1:]
        self._history.append(HistoryEntry(reference, description))
        self._current_index = len(self._history) - 1

    def _charge(self, cost: int) -> bool:
        try:
            self.account.deduct_credits(cost)
        except AccountError as exc:
            logger.error("Result recorded but %s credit(s) could not be deducted: %s", cost, exc)
            self._notify("Credit deduction failed", str(exc), variant="destructive")
            return False
        return True

    def _reject(self, kind: ErrorKind, message: str, record: bool = True) -> SubmitOutcome:
        if record:
            self.error = message
        self._notify(f"{self.label} edit failed", message, variant="destructive")
        return SubmitOutcome(error_kind=kind, message=message)

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(title, description, variant)
        except Exception:  # noqa: BLE001
            logger.exception("Notifier raised while reporting %r", title)

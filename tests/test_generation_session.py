"""GenerationSession unit tests."""

from __future__ import annotations

import asyncio
from typing import Any, List

import pytest
import requests

from studio.services.account_service import InMemoryAccountStore, InsufficientCreditsError
from studio.session.errors import ErrorKind, GenerationError
from studio.session.generation_session import BackendResponse, GenerationSession


class RecordingNotifier:
    """Capture notifications for assertions."""

    def __init__(self) -> None:
        self.messages: List[tuple[str, str, str]] = []

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        self.messages.append((title, description, variant))


def ok_call(reference: str):
    async def _call() -> BackendResponse:
        return BackendResponse(success=True, result_reference=reference)

    return _call


def failing_call(exc: BaseException):
    calls: list[int] = []

    async def _call() -> Any:
        calls.append(1)
        raise exc

    _call.calls = calls  # type: ignore[attr-defined]
    return _call


def build_session(credits: int = 3, initial: str | None = "img0") -> GenerationSession:
    return GenerationSession(InMemoryAccountStore(credits), notifier=RecordingNotifier(), initial_reference=initial)


def references(session: GenerationSession) -> list[str]:
    return [entry.result_reference for entry in session.history]


def test_empty_session_state():
    session = build_session(initial=None)

    assert session.current_index == -1
    assert session.history == []
    assert session.current_result() is None
    assert not session.can_undo()
    assert not session.can_redo()
    assert session.undo() is None
    assert session.redo() is None


def test_initial_reference_is_first_entry():
    session = build_session()

    assert references(session) == ["img0"]
    assert session.current_index == 0
    assert session.current_result() == "img0"
    assert session.history[0].request_description == "original"


def test_branch_discard_scenario():
    session = build_session(credits=3)

    first = asyncio.run(session.submit("brighten", 1, ok_call("img1")))
    assert first.ok
    assert first.reference == "img1"
    assert first.credits_deducted is True
    assert references(session) == ["img0", "img1"]
    assert session.current_index == 1
    assert session.credits == 2

    assert session.undo() == "img0"
    assert session.current_index == 0

    second = asyncio.run(session.submit("sharpen", 1, ok_call("img2")))
    assert second.ok
    assert references(session) == ["img0", "img2"]
    assert session.current_index == 1
    assert session.credits == 1
    assert session.history[1].request_description == "sharpen"


def test_consecutive_submissions_grow_history():
    session = build_session(credits=10, initial=None)

    for number in range(4):
        asyncio.run(session.submit(f"step {number}", 1, ok_call(f"img{number}")))

    assert len(session.history) == 4
    assert session.current_index == len(session.history) - 1
    assert session.credits == 6


def test_undo_then_redo_restores_result():
    session = build_session(credits=5)
    asyncio.run(session.submit("a", 1, ok_call("img1")))
    asyncio.run(session.submit("b", 1, ok_call("img2")))
    before = session.current_result()

    session.undo()
    assert session.can_redo()
    assert session.redo() == before
    assert session.current_result() == before
    assert not session.can_redo()
    assert session.redo() is None


def test_insufficient_credits_skips_remote_call():
    session = build_session(credits=1)
    remote = failing_call(AssertionError("must not be called"))

    outcome = asyncio.run(session.submit("upscale", 2, remote))

    assert outcome.error_kind == ErrorKind.INSUFFICIENT_CREDITS
    assert remote.calls == []
    assert references(session) == ["img0"]
    assert session.credits == 1
    assert session.error == outcome.message


def test_cost_must_be_positive():
    session = build_session()
    with pytest.raises(ValueError):
        asyncio.run(session.submit("free", 0, ok_call("img1")))


@pytest.mark.parametrize(
    "exc, expected",
    [
        (requests.Timeout("read timed out"), ErrorKind.REMOTE_UNAVAILABLE),
        (requests.ConnectionError("refused"), ErrorKind.REMOTE_UNAVAILABLE),
        (RuntimeError("IMAGE_SAFETY: blocked"), ErrorKind.REMOTE_REJECTED),
        (GenerationError("nope", ErrorKind.REMOTE_REJECTED), ErrorKind.REMOTE_REJECTED),
        (RuntimeError("proxy exploded"), ErrorKind.REMOTE_UNAVAILABLE),
    ],
)
def test_remote_failures_leave_state_untouched(exc, expected):
    session = build_session(credits=3)

    outcome = asyncio.run(session.submit("edit", 1, failing_call(exc)))

    assert outcome.error_kind == expected
    assert not outcome.ok
    assert references(session) == ["img0"]
    assert session.credits == 3
    assert not session.is_loading


def test_success_without_reference_is_invalid_result():
    session = build_session(credits=3)

    async def empty_call() -> BackendResponse:
        return BackendResponse(success=True, result_reference=None)

    outcome = asyncio.run(session.submit("edit", 1, empty_call))

    assert outcome.error_kind == ErrorKind.INVALID_RESULT
    assert session.credits == 3
    assert references(session) == ["img0"]


def test_unsuccessful_mapping_payload_is_classified():
    session = build_session(credits=3)

    async def rejected_call() -> dict:
        return {"success": False, "error": "Prediction flagged as sensitive (E005)"}

    outcome = asyncio.run(session.submit("edit", 1, rejected_call))

    assert outcome.error_kind == ErrorKind.REMOTE_REJECTED
    assert "E005" in outcome.message
    assert session.credits == 3


def test_mapping_payload_with_image_url_succeeds():
    session = build_session(credits=3)

    async def proxy_call() -> dict:
        return {"success": True, "imageUrl": "https://replicate.delivery/out.jpg", "data": {"id": "p1"}}

    outcome = asyncio.run(session.submit("edit", 1, proxy_call))

    assert outcome.ok
    assert outcome.data == {"id": "p1"}
    assert session.current_result() == "https://replicate.delivery/out.jpg"


def test_concurrent_submit_is_rejected():
    session = build_session(credits=3)

    async def scenario():
        release = asyncio.Event()
        started = asyncio.Event()

        async def slow_call() -> BackendResponse:
            started.set()
            await release.wait()
            return BackendResponse(success=True, result_reference="img1")

        first = asyncio.create_task(session.submit("slow", 1, slow_call))
        await started.wait()
        assert session.is_loading
        second = await session.submit("fast", 1, ok_call("img2"))
        release.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert second.error_kind == ErrorKind.ALREADY_IN_PROGRESS
    assert first.ok
    assert references(session) == ["img0", "img1"]
    assert session.credits == 2
    assert not session.is_loading


def test_failed_deduction_keeps_result():
    class RacingAccount(InMemoryAccountStore):
        def deduct_credits(self, amount: int) -> None:
            raise InsufficientCreditsError(amount, 0)

    notifier = RecordingNotifier()
    session = GenerationSession(RacingAccount(5), notifier=notifier, initial_reference="img0")

    outcome = asyncio.run(session.submit("edit", 1, ok_call("img1")))

    assert outcome.ok
    assert outcome.credits_deducted is False
    assert session.current_result() == "img1"
    assert any(variant == "destructive" for _, _, variant in notifier.messages)


def test_broken_notifier_does_not_affect_outcome():
    class BrokenNotifier:
        def notify(self, title: str, description: str, variant: str = "default") -> None:
            raise RuntimeError("toast failed")

    session = GenerationSession(InMemoryAccountStore(2), notifier=BrokenNotifier(), initial_reference="img0")

    outcome = asyncio.run(session.submit("edit", 1, ok_call("img1")))

    assert outcome.ok
    assert session.credits == 1


def test_reset_replaces_history():
    session = build_session(credits=3)
    asyncio.run(session.submit("edit", 1, ok_call("img1")))

    session.reset("other")

    assert references(session) == ["other"]
    assert session.original_result() == "other"
    assert session.error is None

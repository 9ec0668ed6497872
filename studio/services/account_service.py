"""Credit accounts backing generation sessions."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class AccountError(RuntimeError):
    """Raised when the account store cannot complete a credit operation."""


class InsufficientCreditsError(AccountError):
    """Raised when a deduction would take the balance below zero."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"Insufficient credits: requested {requested}, available {available}")
        self.requested = requested
        self.available = available


class AccountStore(Protocol):
    """Owner of a user's credit balance."""

    def get_credits(self) -> int:
        ...

    def deduct_credits(self, amount: int) -> None:
        ...


class InMemoryAccountStore:
    """Thread-safe credit balance kept in process memory."""

    def __init__(self, credits: int = 100, default_credits: int = 100) -> None:
        if credits < 0:
            raise ValueError("credits must be non-negative")
        self._credits = credits
        self.default_credits = default_credits
        self._lock = threading.Lock()

    def get_credits(self) -> int:
        with self._lock:
            return self._credits

    def deduct_credits(self, amount: int) -> None:
        """Atomically check and decrement the balance."""
        if amount < 1:
            raise ValueError("amount must be at least 1")
        with self._lock:
            if self._credits < amount:
                raise InsufficientCreditsError(amount, self._credits)
            self._credits -= amount

    def add_credits(self, amount: int) -> int:
        if amount < 1:
            raise ValueError("amount must be at least 1")
        with self._lock:
            self._credits += amount
            return self._credits

    def reset_credits(self) -> int:
        with self._lock:
            self._credits = self.default_credits
            return self._credits


class JsonAccountStore:
    """Credit balance persisted in a small JSON profile file.

    The file holds a single object such as ``{"user_id": "...", "credits": 42}``.
    Reads and writes go through one lock so concurrent sessions in the same
    process never lose an update.
    """

    def __init__(self, path: Path, default_credits: int = 100, user_id: Optional[str] = None) -> None:
        self.path = Path(path)
        self.default_credits = default_credits
        self.user_id = user_id
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"user_id": self.user_id, "credits": self.default_credits}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise AccountError(f"Account file {self.path} is corrupt: {exc}") from exc
        except OSError as exc:
            raise AccountError(f"Could not read account file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise AccountError(f"Account file {self.path} does not contain an object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise AccountError(f"Could not write account file {self.path}: {exc}") from exc

    def get_credits(self) -> int:
        with self._lock:
            return int(self._read().get("credits") or 0)

    def deduct_credits(self, amount: int) -> None:
        if amount < 1:
            raise ValueError("amount must be at least 1")
        with self._lock:
            data = self._read()
            available = int(data.get("credits") or 0)
            if available < amount:
                raise InsufficientCreditsError(amount, available)
            data["credits"] = available - amount
            self._write(data)
        logger.info("Deducted %s credit(s), %s remaining", amount, available - amount)

    def add_credits(self, amount: int) -> int:
        if amount < 1:
            raise ValueError("amount must be at least 1")
        with self._lock:
            data = self._read()
            data["credits"] = int(data.get("credits") or 0) + amount
            self._write(data)
            return data["credits"]

    def reset_credits(self) -> int:
        with self._lock:
            data = self._read()
            data["credits"] = self.default_credits
            self._write(data)
            return self.default_credits

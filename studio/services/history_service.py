"""Generation gallery tracking."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GalleryRecord:
    """Metadata describing a generation event."""

    prompt: str
    image_url: str
    model: str
    created_at: float
    credits_used: int = 1
    enhanced_prompt: Optional[str] = None
    category: Optional[str] = None
    aspect_ratio: Optional[str] = None
    resolution: Optional[str] = None
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"generated_{int(self.created_at * 1000)}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GalleryRecord":
        return cls(
            prompt=str(data.get("prompt", "")),
            image_url=str(data.get("image_url", "")),
            model=str(data.get("model", "")),
            created_at=float(data.get("created_at", 0.0)),
            credits_used=int(data.get("credits_used", 1)),
            enhanced_prompt=data.get("enhanced_prompt"),
            category=data.get("category"),
            aspect_ratio=data.get("aspect_ratio"),
            resolution=data.get("resolution"),
            id=str(data.get("id", "")),
        )


class GenerationHistoryService:
    """JSON-backed gallery log, newest first and capped at ``max_items``."""

    def __init__(self, history_path: Path, max_items: int = 50) -> None:
        self.history_path = Path(history_path)
        self.max_items = max_items
        self._lock = threading.Lock()

    def _load(self) -> List[GalleryRecord]:
        if not self.history_path.exists():
            return []
        try:
            raw = json.loads(self.history_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not load generation history from %s: %s", self.history_path, exc)
            return []
        if not isinstance(raw, list):
            logger.error("Generation history at %s is not a list, ignoring it", self.history_path)
            return []
        records: List[GalleryRecord] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.warning("Skipping non-object gallery entry %s in %s", index, self.history_path)
                continue
            try:
                records.append(GalleryRecord.from_dict(item))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed gallery entry %s in %s: %s", index, self.history_path, exc)
        return records

    def _save(self, records: List[GalleryRecord]) -> None:
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [asdict(record) for record in records]
        self.history_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def record(self, record: GalleryRecord) -> None:
        """Prepend a record and persist the capped list."""
        with self._lock:
            records = [record, *self._load()][: self.max_items]
            self._save(records)

    def record_result(self, prompt: str, image_url: str, model: str, **extra: Any) -> GalleryRecord:
        """Build a record stamped with the current time and store it."""
        record = GalleryRecord(prompt=prompt, image_url=image_url, model=model, created_at=time.time(), **extra)
        self.record(record)
        return record

    def list(self, limit: int = 10) -> List[GalleryRecord]:
        """Return the most recent records."""
        with self._lock:
            return self._load()[:limit]

    def clear(self) -> None:
        with self._lock:
            if self.history_path.exists():
                self.history_path.unlink()

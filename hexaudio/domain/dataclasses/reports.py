# hexaudio/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from hexaudio.domain.entities.processing import ProcessingResult


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (subject/id/path, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    @property
    def elapsed_sec(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Batch processing report
# ---------------------------------------------------------------------------
@dataclass
class BatchItemResult:
    """Per-file entry: exactly one of `result` / `error` is set."""
    source: str
    success: bool
    result: Optional[ProcessingResult] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    processing_time: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "success": self.success,
            "result": self.result.as_dict() if self.result else None,
            "error": self.error,
            "error_type": self.error_type,
            "processing_time": self.processing_time,
        }


@dataclass
class BatchReport(BaseReport):
    items: List[BatchItemResult] = field(default_factory=list)
    wave_sizes: List[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.success)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if not i.success)

    @property
    def total_processing_time(self) -> float:
        return sum(i.processing_time for i in self.items)

    @property
    def results(self) -> List[ProcessingResult]:
        return [i.result for i in self.items if i.result is not None]

    def record(self, item: BatchItemResult) -> None:
        self.items.append(item)
        if not item.success:
            self.add_error(item.source, item.error or "unknown error")

    def summary(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total_processing_time": self.total_processing_time,
            "waves": len(self.wave_sizes),
        }

    def as_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "summary": self.summary(),
            "items": [i.as_dict() for i in self.items],
            "error_details": list(self.error_details),
        }

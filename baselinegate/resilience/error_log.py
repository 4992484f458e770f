import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from baselinegate.resilience.classify import error_code

MOST_COMMON_LIMIT = 5


@dataclass(frozen=True)
class ErrorEntry:
    timestamp: str
    type: str
    message: str
    code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "type": self.type,
            "message": self.message,
            "code": self.code,
            **self.metadata,
        }


class ErrorLog:
    """
    Accumulates recovered failures across worker threads.
    The only mutable state shared by a batch; every access holds the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: List[ErrorEntry] = []
        self._counts: Counter = Counter()

    def record(self, error: BaseException, **metadata) -> ErrorEntry:
        entry = ErrorEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            type=type(error).__name__,
            message=str(error),
            code=error_code(error),
            metadata=metadata,
        )
        with self._lock:
            self._entries.append(entry)
            self._counts[f"{entry.type}:{entry.message}"] += 1
        return entry

    def entries(self) -> List[ErrorEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            by_type = Counter(entry.type for entry in self._entries)
            return {
                "total_errors": len(self._entries),
                "unique_errors": len(self._counts),
                "most_common_errors": [
                    {"error": key, "count": count}
                    for key, count in self._counts.most_common(MOST_COMMON_LIMIT)
                ],
                "errors_by_type": dict(by_type),
            }

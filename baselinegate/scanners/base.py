import bisect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Tuple

from baselinegate.errors import ParseError
from baselinegate.models.occurrence import Occurrence


@dataclass
class ScanResult:
    occurrences: List[Occurrence] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)


class LineIndex:
    """Maps character offsets to 1-based (line, column) pairs."""

    def __init__(self, text: str):
        self._starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._starts.append(i + 1)

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._starts, offset) - 1
        return line + 1, offset - self._starts[line] + 1


class SourceScanner(ABC):
    """
    Base class for all source scanners.

    Scanners are pure and total: `scan` never raises. Malformed input is
    reported through `ScanResult.errors` and whatever was recognised before
    (or around) the bad construct is still returned.
    """

    language: str = "unknown"
    extensions: Tuple[str, ...] = ()

    def __init__(self):
        self.logger = logging.getLogger(f"baselinegate.scanners.{self.language}")

    @abstractmethod
    def _scan(self, source_text: str, file_path: str, result: ScanResult) -> None:
        """Append occurrences and recoverable errors to `result`."""
        pass

    def scan(self, source_text: str, file_path: str) -> ScanResult:
        result = ScanResult()
        if not source_text or not source_text.strip():
            return result

        try:
            self._scan(source_text, file_path, result)
        except Exception as e:
            # Last-resort boundary: keep the partial result for this file.
            result.errors.append(
                ParseError(file_path, 1, 1, f"scanner failure: {type(e).__name__}: {e}", self.language)
            )

        for error in result.errors:
            self.logger.warning(f"Failed to parse {self.language} in {file_path}: {error.reason} ({error.line}:{error.column})")

        self.logger.debug(f"Detected {len(result.occurrences)} {self.language} occurrences in {file_path}")
        return result

    def detect_features(self, source_text: str, file_path: str) -> List[Occurrence]:
        return self.scan(source_text, file_path).occurrences

    def handles(self, file_path: str) -> bool:
        return file_path.lower().endswith(self.extensions)

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from baselinegate.errors import TransientIOError
from baselinegate.resilience.classify import is_transient_fs_error
from baselinegate.resilience.error_log import ErrorLog
from baselinegate.resilience.retry import with_retry

logger = logging.getLogger("baselinegate.sources")

FS_RETRY_DELAY = 0.1


def read_source(
    path: Path,
    encoding: str = "utf-8",
    max_retries: int = 3,
    retry_delay: float = FS_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Read one file, retrying only busy / out-of-descriptor failures."""
    path = Path(path)
    return with_retry(
        lambda: path.read_text(encoding=encoding, errors="replace"),
        context=f"read {path}",
        max_retries=max_retries,
        retry_delay=retry_delay,
        is_retryable=is_transient_fs_error,
        sleep=sleep,
    )


def load_sources(
    paths: Iterable[Path],
    error_log: Optional[ErrorLog] = None,
    max_retries: int = 3,
    retry_delay: float = FS_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> List[Tuple[str, str]]:
    """
    Read files into `(path, text)` pairs for `run_batch`.
    Unreadable files are logged and recorded, never fatal.
    """
    sources = []
    for path in paths:
        try:
            text = read_source(path, max_retries=max_retries, retry_delay=retry_delay, sleep=sleep)
        except (OSError, TransientIOError) as e:
            logger.error(f"Could not read {path}: {e}")
            if error_log is not None:
                error_log.record(e, file=str(path), stage="read")
            continue
        sources.append((str(path), text))

    logger.debug(f"Loaded {len(sources)} source files")
    return sources

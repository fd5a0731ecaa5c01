"""
Running counters for one import run
"""

import resource
import sys
import time
from typing import Any, Dict, Optional


def current_memory_usage() -> int:
    """Peak resident set size of this process in bytes"""
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is kilobytes on Linux, bytes on macOS
    return usage if sys.platform == "darwin" else usage * 1024


class ImportStatistics:
    """
    Counters mutated by the runner as records are classified.

    Once ``finish()`` is called duration and memory are frozen, so the
    summary printed later reflects the run and not the reporting time.
    """

    def __init__(
        self,
        total_processed: int = 0,
        successful_imports: int = 0,
        failed_validations: int = 0,
        start_time: Optional[float] = None,
        start_memory: Optional[int] = None
    ):
        self.total_processed = total_processed
        self.successful_imports = successful_imports
        self.failed_validations = failed_validations
        self.start_time = time.time() if start_time is None else start_time
        self.start_memory = current_memory_usage() if start_memory is None else start_memory
        self.end_time: Optional[float] = None
        self.end_memory: Optional[int] = None

    def increment_success(self) -> None:
        self.successful_imports += 1
        self.total_processed += 1

    def increment_failed(self) -> None:
        self.failed_validations += 1
        self.total_processed += 1

    def finish(self) -> None:
        if self.end_time is None:
            self.end_time = time.time()
            self.end_memory = current_memory_usage()

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    def success_rate(self) -> float:
        """Percentage of processed records that passed validation"""
        if self.total_processed == 0:
            return 0.0
        return self.successful_imports / self.total_processed * 100

    def duration(self) -> float:
        """Seconds since start (or until ``finish()``)"""
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    def memory_used(self) -> int:
        end = self.end_memory if self.end_memory is not None else current_memory_usage()
        return max(0, end - self.start_memory)

    def average_time_per_item(self) -> float:
        """Milliseconds per processed record"""
        if self.total_processed == 0:
            return 0.0
        return self.duration() / self.total_processed * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "successful_imports": self.successful_imports,
            "failed_validations": self.failed_validations,
            "success_rate": self.success_rate(),
            "duration": self.duration(),
            "memory_used": self.memory_used(),
            "average_time_per_item": self.average_time_per_item(),
        }

"""Process-wide I/O accounting for database file reads and writes."""
from contextlib import contextmanager
from dataclasses import dataclass, asdict
import logging
import time

logger = logging.getLogger(__name__)


@dataclass
class IOCounter:
    reads: int = 0
    writes: int = 0
    read_bytes: int = 0
    write_bytes: int = 0
    total_time_ms: float = 0.0

    def count_read(self, nbytes=0):
        self.reads += 1
        self.read_bytes += nbytes

    def count_write(self, nbytes=0):
        self.writes += 1
        self.write_bytes += nbytes

    def reset(self):
        self.reads = self.writes = self.read_bytes = self.write_bytes = 0
        self.total_time_ms = 0.0

    def report(self, title="I/O report"):
        logger.info("%s: %d reads (%d B), %d writes (%d B) in %.2f ms", title,
                    self.reads, self.read_bytes, self.writes, self.write_bytes, self.total_time_ms)


_counter = IOCounter()

def count_read(nbytes=0):
    _counter.count_read(nbytes)

def count_write(nbytes=0):
    _counter.count_write(nbytes)

def reset_counters():
    _counter.reset()

def show_report(title="Database I/O"):
    _counter.report(title)

def get_counters():
    return asdict(_counter)

@contextmanager
def timed():
    """Add the wall time of the block to total_time_ms."""
    t0 = time.perf_counter()
    try:
        yield _counter
    finally:
        _counter.total_time_ms += (time.perf_counter() - t0) * 1000

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional


RESOLVED = "resolved"
PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class FetchTrace:
    ref: str
    outcome: str
    elapsed_s: float

    @property
    def elapsed_ms(self) -> float:
        return round(self.elapsed_s * 1000.0, 3)


@dataclass
class PerfTracer:
    """Per-report timing of image resolution.

    Every resolved reference is recorded with its outcome; only the slow ones
    are logged, so a report with healthy fetches leaves the log quiet.
    """

    logger: Optional[logging.Logger] = None
    threshold_s: float = 1.0
    traces: List[FetchTrace] = field(default_factory=list)

    def __post_init__(self):
        self.logger = self.logger or logging.getLogger("dispatch.perf")
        self.threshold_s = float(self.threshold_s)

    def start(self) -> float:
        return time.perf_counter()

    def record(self, ref: str, t0: float, outcome: str) -> FetchTrace:
        trace = FetchTrace(ref=str(ref), outcome=str(outcome), elapsed_s=time.perf_counter() - float(t0))
        self.traces.append(trace)
        if trace.elapsed_s > self.threshold_s:
            self.logger.info("IMAGE_RESOLVE slow outcome=%s dt=%.2fms | %s", trace.outcome, trace.elapsed_ms, trace.ref)
        return trace

    def slow(self) -> List[FetchTrace]:
        return [t for t in self.traces if t.elapsed_s > self.threshold_s]

    def summary(self) -> Dict[str, object]:
        placeholders = sum(1 for t in self.traces if t.outcome == PLACEHOLDER)
        return {
            "images": len(self.traces),
            "resolved": len(self.traces) - placeholders,
            "placeholders": placeholders,
            "slow": len(self.slow()),
            "max_ms": max((t.elapsed_ms for t in self.traces), default=0.0),
        }

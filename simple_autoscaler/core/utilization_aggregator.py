from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np

from simple_autoscaler.domain.app_snapshot import AppSnapshot, InstanceSample

RUNNING_STATE = "RUNNING"


@dataclass(frozen=True)
class Utilization:
    running: int
    cpu_pct: int
    mem_pct: int


def _is_trustworthy(sample: InstanceSample) -> bool:
    return (
        sample.state == RUNNING_STATE
        and 0 <= sample.cpu <= 1
        and sample.mem_quota > 0
        and 0 <= sample.mem <= sample.mem_quota
    )


def _to_pct(total: float, count: int) -> int:
    # round half up; inputs are non-negative so truncation is a floor
    return int(total / count * 100.0 + 0.5)


def aggregate(samples: Mapping[str, InstanceSample]) -> Utilization:
    """
    Averages CPU and memory usage over the instances whose telemetry looks
    sane. Anything not running or outside physical bounds is skipped rather
    than failing the app: the decision engine refuses to scale an app whose
    running count does not match its desired count anyway.
    """
    included = [s for s in samples.values() if _is_trustworthy(s)]
    if not included:
        return Utilization(running=0, cpu_pct=0, mem_pct=0)

    cpu = np.array([s.cpu for s in included], dtype=float)
    mem = np.array([s.mem for s in included], dtype=float) / np.array([s.mem_quota for s in included], dtype=float)

    running = len(included)
    return Utilization(
        running=running,
        cpu_pct=_to_pct(float(cpu.sum()), running),
        mem_pct=_to_pct(float(mem.sum()), running),
    )


def build_snapshot(
        guid: str,
        name: str,
        space: str,
        org: str,
        started: bool,
        desired: int,
        samples: Optional[Mapping[str, InstanceSample]] = None,
) -> AppSnapshot:
    utilization = aggregate(samples or {}) if started else Utilization(0, 0, 0)
    return AppSnapshot(
        guid=guid,
        name=name,
        space=space,
        org=org,
        instances=desired,
        instances_running=utilization.running,
        cpu_pct=utilization.cpu_pct,
        mem_pct=utilization.mem_pct,
    )

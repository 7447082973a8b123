from dataclasses import dataclass
from typing import Optional


@dataclass
class Rule:
    """A scaling rule as declared by the operator, before validation."""
    app: str
    space: str
    org: str
    min_instances: int
    max_instances: int
    min_cpu: int = 0
    max_cpu: int = 0
    min_mem: int = 0
    max_mem: int = 0


@dataclass(frozen=True)
class Threshold:
    low: int
    high: int

    def wants_scale_out(self, pct: int) -> bool:
        return pct >= self.high

    def allows_scale_in(self, pct: int) -> bool:
        return pct <= self.low


@dataclass(frozen=True)
class ScalingRule:
    """
    Validated rule. A dimension set to None is not monitored: it never
    triggers a scale-out and never vetoes a scale-in.
    """
    app: str
    space: str
    org: str
    min_instances: int
    max_instances: int
    cpu: Optional[Threshold]
    mem: Optional[Threshold]

    @property
    def key(self) -> tuple[str, str, str]:
        return self.app, self.space, self.org


"""
[
  {"app": "web", "space": "prod", "org": "acme",
   "min_instances": 3, "max_instances": 10,
   "scale_in_cpu": 20, "scale_out_cpu": 70,
   "scale_in_mem": 0, "scale_out_mem": 0}
]
"""

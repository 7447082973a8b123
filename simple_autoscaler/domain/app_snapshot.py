from dataclasses import dataclass


@dataclass(frozen=True)
class InstanceSample:
    state: str
    cpu: float
    mem: int
    mem_quota: int


@dataclass(frozen=True)
class AppSnapshot:
    guid: str
    name: str
    space: str
    org: str
    instances: int
    instances_running: int = 0
    cpu_pct: int = 0
    mem_pct: int = 0

    def __str__(self) -> str:
        return f"{self.org}/{self.space}/{self.name} ({self.guid})"

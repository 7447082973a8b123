import pytest

from simple_autoscaler.core.utilization_aggregator import Utilization, aggregate, build_snapshot
from simple_autoscaler.domain.app_snapshot import AppSnapshot, InstanceSample

GUID = "01234567-89ab-cdef-0123-456789abcdef"
MEM_QUOTA = 1000


def IS(cpu: float, mem_ratio: float, state: str = "RUNNING") -> InstanceSample:
    return InstanceSample(state=state, cpu=cpu, mem=int(mem_ratio * MEM_QUOTA), mem_quota=MEM_QUOTA)


def test_single_instance():
    assert aggregate({"0": IS(0.5, 0.75)}) == Utilization(running=1, cpu_pct=50, mem_pct=75)


def test_averages_over_instances():
    assert aggregate({"0": IS(0.5, 0.8), "1": IS(0.3, 0.6)}) == Utilization(2, 40, 70)


def test_empty_sample_is_skipped():
    samples = {"0": IS(0.5, 0.8), "1": InstanceSample(state="", cpu=0.0, mem=0, mem_quota=0)}

    assert aggregate(samples) == Utilization(1, 50, 80)


@pytest.mark.parametrize("bad", [
    IS(0.5, 0.5, state="CRASHED"),
    IS(0.5, 0.5, state="STARTING"),
    IS(-0.01, 0.5),
    IS(1.01, 0.5),
    InstanceSample(state="RUNNING", cpu=0.5, mem=-1, mem_quota=MEM_QUOTA),
    InstanceSample(state="RUNNING", cpu=0.5, mem=MEM_QUOTA + 1, mem_quota=MEM_QUOTA),
    InstanceSample(state="RUNNING", cpu=0.5, mem=0, mem_quota=0),
])
def test_untrustworthy_sample_is_excluded(bad: InstanceSample):
    samples = {"0": IS(0.2, 0.4), "1": bad, "2": IS(0.4, 0.6)}

    assert aggregate(samples) == Utilization(2, 30, 50)


def test_physical_bounds_are_inclusive():
    samples = {
        "0": InstanceSample(state="RUNNING", cpu=0.0, mem=0, mem_quota=MEM_QUOTA),
        "1": InstanceSample(state="RUNNING", cpu=1.0, mem=MEM_QUOTA, mem_quota=MEM_QUOTA),
    }

    assert aggregate(samples) == Utilization(2, 50, 50)


def test_no_valid_samples():
    samples = {"0": IS(0.9, 0.9, state="DOWN"), "1": IS(2.0, 0.5)}

    assert aggregate(samples) == Utilization(0, 0, 0)
    assert aggregate({}) == Utilization(0, 0, 0)


@pytest.mark.parametrize("cpu, expected", [
    (0.495, 50),
    (0.125, 13),
    (0.625, 63),
    (0.124, 12),
    (0.0, 0),
    (1.0, 100),
])
def test_rounding_is_half_up(cpu: float, expected: int):
    assert aggregate({"0": IS(cpu, 0.0)}).cpu_pct == expected


def test_memory_rounding_is_half_up():
    sample = InstanceSample(state="RUNNING", cpu=0.0, mem=495, mem_quota=1000)

    assert aggregate({"0": sample}).mem_pct == 50


def test_build_snapshot_started():
    snapshot = build_snapshot(GUID, "a", "s", "o", True, 2, {"0": IS(0.5, 0.8), "1": IS(0.3, 0.6)})

    assert snapshot == AppSnapshot(
        guid=GUID, name="a", space="s", org="o",
        instances=2, instances_running=2, cpu_pct=40, mem_pct=70,
    )


def test_build_snapshot_started_with_bad_samples_undercounts():
    snapshot = build_snapshot(GUID, "a", "s", "o", True, 2, {"0": IS(0.5, 0.8), "1": IS(1.5, 0.8)})

    assert snapshot.instances == 2
    assert snapshot.instances_running == 1


def test_build_snapshot_stopped_ignores_samples():
    snapshot = build_snapshot(GUID, "a", "s", "o", False, 4, {"0": IS(0.5, 0.8)})

    assert snapshot == AppSnapshot(guid=GUID, name="a", space="s", org="o", instances=4)

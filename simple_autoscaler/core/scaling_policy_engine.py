from typing import Optional, Sequence

from simple_autoscaler.core.rule_validator import rule_for
from simple_autoscaler.domain.app_snapshot import AppSnapshot
from simple_autoscaler.domain.errors import (
    InstancesMismatchError,
    InstancesOutOfBoundsError,
    NoApplicableRuleError,
)
from simple_autoscaler.domain.rule import ScalingRule, Threshold


def _wants_scale_out(threshold: Optional[Threshold], pct: int) -> bool:
    return threshold is not None and threshold.wants_scale_out(pct)


def _allows_scale_in(threshold: Optional[Threshold], pct: int) -> bool:
    return threshold is None or threshold.allows_scale_in(pct)


def decide(app: AppSnapshot, rule: Optional[ScalingRule]) -> int:
    """
    Returns the instance count the app should run next: unchanged, one more
    or one fewer. Raises a DecisionError when the app cannot be judged.
    """
    if rule is None:
        raise NoApplicableRuleError()

    current = app.instances
    if current < rule.min_instances or current > rule.max_instances:
        raise InstancesOutOfBoundsError(current, rule.min_instances, rule.max_instances)

    # mid-transition averages are not representative
    if current != app.instances_running:
        raise InstancesMismatchError(app.instances_running, current)

    if current < rule.max_instances and (
            _wants_scale_out(rule.cpu, app.cpu_pct) or
            _wants_scale_out(rule.mem, app.mem_pct)
    ):
        return current + 1

    if current > rule.min_instances and (
            _allows_scale_in(rule.cpu, app.cpu_pct) and
            _allows_scale_in(rule.mem, app.mem_pct)
    ):
        return current - 1

    return current


class ScalingPolicyEngine:
    def __init__(self, rules: Sequence[ScalingRule]):
        self.rules: tuple[ScalingRule, ...] = tuple(rules)

    def rule_for(self, app: AppSnapshot) -> Optional[ScalingRule]:
        return rule_for(self.rules, app.name, app.space, app.org)

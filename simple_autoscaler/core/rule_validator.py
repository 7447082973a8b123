import logging
from typing import Optional, Sequence

from simple_autoscaler.config import MIN_INSTANCES_LIMIT
from simple_autoscaler.domain.errors import ConfigurationError
from simple_autoscaler.domain.rule import Rule, ScalingRule, Threshold

logger = logging.getLogger(__name__)


def _in_percent_range(value: int) -> bool:
    return 0 <= value <= 100


def _check_rule(rule: Rule) -> Optional[str]:
    """Returns the reason the rule is invalid, or None."""
    cpu_disabled = rule.min_cpu == 0 and rule.max_cpu == 0
    mem_disabled = rule.min_mem == 0 and rule.max_mem == 0

    if not rule.app:
        return "no app specified"
    if not rule.space:
        return "no space specified"
    if not rule.org:
        return "no org specified"
    if rule.min_instances < MIN_INSTANCES_LIMIT:
        return f"minimum instances should be >= {MIN_INSTANCES_LIMIT}"
    if rule.max_instances <= rule.min_instances:
        return "maximum instances should be more than minimum instances"
    if not _in_percent_range(rule.max_cpu):
        return "max cpu threshold should be in the range 0<=t<=100"
    if not _in_percent_range(rule.min_cpu):
        return "min cpu threshold should be in the range 0<=t<=100"
    if not cpu_disabled and rule.min_cpu >= rule.max_cpu:
        return "min cpu threshold should be less than max cpu threshold"
    if not _in_percent_range(rule.max_mem):
        return "max mem threshold should be in the range 0<=t<=100"
    if not _in_percent_range(rule.min_mem):
        return "min mem threshold should be in the range 0<=t<=100"
    if not mem_disabled and rule.min_mem >= rule.max_mem:
        return "min mem threshold should be less than max mem threshold"
    if cpu_disabled and mem_disabled:
        return "no cpu/mem thresholds defined"
    return None


def _normalize(rule: Rule) -> ScalingRule:
    cpu: Optional[Threshold] = Threshold(rule.min_cpu, rule.max_cpu)
    mem: Optional[Threshold] = Threshold(rule.min_mem, rule.max_mem)

    if rule.min_mem == 0 and rule.max_mem == 0:
        mem = None
    elif rule.min_cpu == 0 and rule.max_cpu == 0:
        cpu = None

    return ScalingRule(
        app=rule.app,
        space=rule.space,
        org=rule.org,
        min_instances=rule.min_instances,
        max_instances=rule.max_instances,
        cpu=cpu,
        mem=mem,
    )


def validate_rule(rule: Rule) -> ScalingRule:
    reason = _check_rule(rule)
    if reason is not None:
        raise ConfigurationError(reason)
    return _normalize(rule)


def validate_rules(rules: Sequence[Rule]) -> tuple[ScalingRule, ...]:
    """
    Validates and normalizes the declared rules in order. The first invalid
    rule aborts validation with a ConfigurationError naming its index.
    """
    validated: list[ScalingRule] = []
    first_seen: dict[tuple[str, str, str], int] = {}

    for idx, rule in enumerate(rules):
        try:
            scaling_rule = validate_rule(rule)
        except ConfigurationError as exc:
            raise ConfigurationError(exc.reason, idx) from exc

        if scaling_rule.key in first_seen:
            raise ConfigurationError(
                f"duplicate rule for app/space/org, first declared as rule {first_seen[scaling_rule.key]}",
                idx,
            )
        first_seen[scaling_rule.key] = idx
        validated.append(scaling_rule)

    logger.info(f"Validated {len(validated)} autoscaler rules")
    return tuple(validated)


def rule_for(rules: Sequence[ScalingRule], app: str, space: str, org: str) -> Optional[ScalingRule]:
    return next((r for r in rules if r.key == (app, space, org)), None)

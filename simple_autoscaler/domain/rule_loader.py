import json
from typing import Any

from simple_autoscaler.domain.errors import ConfigurationError
from simple_autoscaler.domain.rule import Rule

_THRESHOLD_KEYS = {
    "min_cpu": "scale_in_cpu",
    "max_cpu": "scale_out_cpu",
    "min_mem": "scale_in_mem",
    "max_mem": "scale_out_mem",
}


def _as_int(idx: int, value: Any, key: str) -> int:
    # bool is an int subclass; "true" is not a threshold
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"'{key}' should be an integer, got {value!r}", idx)
    return value


def _as_str(idx: int, value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"'{key}' should be a string, got {value!r}", idx)
    return value


def parse_rules(data: Any) -> list[Rule]:
    if not isinstance(data, list):
        raise ConfigurationError("rules should be a JSON array")

    rules = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigurationError("rule should be a JSON object", idx)
        try:
            rule = Rule(
                app=_as_str(idx, entry.get("app", ""), "app"),
                space=_as_str(idx, entry.get("space", ""), "space"),
                org=_as_str(idx, entry.get("org", ""), "org"),
                min_instances=_as_int(idx, entry["min_instances"], "min_instances"),
                max_instances=_as_int(idx, entry["max_instances"], "max_instances"),
                **{
                    field: _as_int(idx, entry.get(key, 0), key)
                    for field, key in _THRESHOLD_KEYS.items()
                },
            )
        except KeyError as exc:
            raise ConfigurationError(f"missing key {exc}", idx) from exc
        rules.append(rule)
    return rules


def loads_rules(text: str) -> list[Rule]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"parse autoscaler rules: {exc}") from exc
    return parse_rules(data)


def load_rules(path: str) -> list[Rule]:
    try:
        with open(path, 'r') as f:
            text = f.read()
    except OSError as exc:
        raise ConfigurationError(f"read autoscaler rules from {path}: {exc}") from exc
    return loads_rules(text)

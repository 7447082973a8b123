import json

import pytest

from simple_autoscaler.config import Settings
from simple_autoscaler.domain.errors import ConfigurationError
from simple_autoscaler.main import load_validated_rules, main

RULES = [
    {"app": "web", "space": "prod", "org": "acme",
     "min_instances": 3, "max_instances": 10,
     "scale_in_cpu": 20, "scale_out_cpu": 70},
]


def test_load_validated_rules_from_inline_json():
    settings = Settings(api_url="https://api", rules_json=json.dumps(RULES))

    [rule] = load_validated_rules(settings)

    assert rule.key == ("web", "prod", "acme")
    assert rule.mem is None


def test_load_validated_rules_from_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(RULES))

    [rule] = load_validated_rules(Settings(api_url="https://api", rules_file=str(path)))

    assert rule.cpu.high == 70


def test_load_validated_rules_rejects_invalid_rule():
    bad = [dict(RULES[0], min_instances=1)]

    with pytest.raises(ConfigurationError, match="rule 0"):
        load_validated_rules(Settings(api_url="https://api", rules_json=json.dumps(bad)))


@pytest.mark.parametrize("env", [
    {"CF_API_URL": "https://api"},
    {"CF_API_URL": "https://api", "AUTOSCALER_RULES": "not json"},
    {"CF_API_URL": "https://api", "AUTOSCALER_RULES": json.dumps([dict(RULES[0], scale_out_cpu=0)])},
    {"CF_API_URL": "https://api", "AUTOSCALER_RULES": json.dumps(RULES), "LOG_LEVEL": "chatty"},
])
def test_main_exits_on_bad_configuration(monkeypatch, env):
    for name in ("CF_API_URL", "AUTOSCALER_RULES", "AUTOSCALER_RULES_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    assert main() == 1

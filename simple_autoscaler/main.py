import logging
import signal
import sys
import threading

from simple_autoscaler.config import VERSION, Settings
from simple_autoscaler.core.rule_validator import validate_rules
from simple_autoscaler.core.scaling_decision_service import ScalingDecisionService
from simple_autoscaler.domain.errors import ConfigurationError
from simple_autoscaler.domain.rule import ScalingRule
from simple_autoscaler.domain.rule_loader import load_rules, loads_rules
from simple_autoscaler.infra.cloud_foundry_client import CloudFoundryClient
from simple_autoscaler.infra.health_server import start_health_server

logger = logging.getLogger("simple_autoscaler")


def load_validated_rules(settings: Settings) -> tuple[ScalingRule, ...]:
    if settings.rules_json is not None:
        rules = loads_rules(settings.rules_json)
    else:
        rules = load_rules(settings.rules_file)
    logger.info(f"Validating autoscaler rules: {rules}")
    return validate_rules(rules)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info(f"simple-autoscaler {VERSION} starting")

    # --- Configuration ---
    try:
        settings = Settings.from_env()
        logging.getLogger().setLevel(settings.log_level)
        rules = load_validated_rules(settings)
    except (ConfigurationError, ValueError) as exc:
        logger.critical(f"Invalid configuration: {exc}")
        return 1

    # --- Infrastructure ---
    start_health_server(settings.port)
    client = CloudFoundryClient(
        base_url=settings.api_url,
        access_token=settings.access_token,
        verify_ssl=not settings.skip_ssl_validation,
    )

    # --- Main loop ---
    decision_service = ScalingDecisionService(rules=rules, client=client)
    stop_event = threading.Event()

    def _stop(signum, _frame):
        logger.info(f"Received signal {signum}; finishing current iteration")
        stop_event.set()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    decision_service.run(stop_event, settings.interval_sec)
    return 0


if __name__ == "__main__":
    sys.exit(main())

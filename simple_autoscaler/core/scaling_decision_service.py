# simple_autoscaler/core/scaling_decision_service.py
import logging
import threading
import time
from typing import Sequence

from simple_autoscaler.config import INTERVAL_SEC, MIN_INSTANCES_LIMIT
from simple_autoscaler.core.scaling_policy_engine import ScalingPolicyEngine, decide
from simple_autoscaler.domain.app_snapshot import AppSnapshot
from simple_autoscaler.domain.errors import (
    DecisionError,
    FetchError,
    InvariantViolation,
    ScaleError,
)
from simple_autoscaler.domain.platform_client import PlatformClient
from simple_autoscaler.domain.rule import ScalingRule

logger = logging.getLogger(__name__)


class ScalingDecisionService:
    """
    One tick:
    1.  Fetch every app from the platform. If that fails the tick is skipped.
    2.  For each app pick the matching rule and compute the target count.
        An app that cannot be judged is logged and skipped.
    3.  If the target differs from the current count, ask the platform to
        scale. Failures are logged; there is no retry within the tick.
    """

    def __init__(self, rules: Sequence[ScalingRule], client: PlatformClient) -> None:
        self.client: PlatformClient = client
        self.engine = ScalingPolicyEngine(rules)

    # ─────────────────────────── helpers ────────────────────────────
    def _scale(self, app: AppSnapshot, desired: int) -> None:
        if desired < MIN_INSTANCES_LIMIT:
            raise InvariantViolation(
                f"illegal to scale below {MIN_INSTANCES_LIMIT} instances (target {desired})"
            )
        self.client.scale(app, desired)
        logger.info(f"Scaled app {app}: {app.instances} -> {desired} instances")

    def autoscale_app(self, app: AppSnapshot) -> None:
        rule = self.engine.rule_for(app)
        try:
            desired = decide(app, rule)
        except DecisionError as exc:
            logger.warning(
                f"autoscale app {app}: {exc} "
                f"(instances={app.instances}, running={app.instances_running}, "
                f"cpu={app.cpu_pct}%, mem={app.mem_pct}%, rule={rule})"
            )
            return

        logger.info(
            f"autoscale app {app}: target {desired} instances "
            f"(current={app.instances}, cpu={app.cpu_pct}%, mem={app.mem_pct}%)"
        )
        if desired == app.instances:
            return

        try:
            self._scale(app, desired)
        except InvariantViolation as exc:
            logger.error(f"autoscale app {app}: {exc}; rule={rule}")
        except ScaleError as exc:
            logger.error(f"autoscale app {app}: scale to {desired} failed: {exc}")

    def autoscale_apps(self) -> None:
        try:
            apps = self.client.fetch_apps()
        except FetchError as exc:
            logger.error(f"get app list: {exc}; skipping iteration")
            return

        for app in apps.values():
            try:
                self.autoscale_app(app)
            except Exception:
                logger.exception(f"autoscale app {app}: unexpected error")

    def run(self, stop_event: threading.Event, interval_sec: float = INTERVAL_SEC) -> None:
        """Ticks until stop_event is set. A tick in progress always completes."""
        logger.info(f"Starting autoscaler loop (interval={interval_sec}s)")
        while not stop_event.is_set():
            started = time.monotonic()
            logger.info("Starting autoscaler iteration")
            try:
                self.autoscale_apps()
            except Exception:
                logger.exception("autoscaler iteration failed; continuing with next tick")
            elapsed = time.monotonic() - started
            stop_event.wait(max(0.0, interval_sec - elapsed))
        logger.info("Autoscaler loop stopped")

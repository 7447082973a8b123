from typing import Optional


class AutoscalerError(Exception):
    pass


class ConfigurationError(AutoscalerError):
    """Invalid startup configuration; fatal."""

    def __init__(self, reason: str, index: Optional[int] = None) -> None:
        self.reason = reason
        self.index = index
        message = reason if index is None else f"rule {index}: {reason}"
        super().__init__(message)


class FetchError(AutoscalerError):
    """Platform unreachable or returned a malformed response; skips one tick."""


class DecisionError(AutoscalerError):
    """The application cannot be evaluated this tick; skips one application."""


class NoApplicableRuleError(DecisionError):
    def __init__(self) -> None:
        super().__init__("no applicable rule")


class InstancesOutOfBoundsError(DecisionError):
    def __init__(self, instances: int, min_instances: int, max_instances: int) -> None:
        self.instances = instances
        super().__init__(
            f"number of instances outside of min/max bounds: "
            f"{instances} not in [{min_instances}, {max_instances}]"
        )


class InstancesMismatchError(DecisionError):
    def __init__(self, running: int, desired: int) -> None:
        self.running = running
        self.desired = desired
        super().__init__(f"number of running instances differs from desired: {running}/{desired}")


class ScaleError(AutoscalerError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class InvariantViolation(AutoscalerError):
    """A computed target would break a guarantee the rule set should already give."""

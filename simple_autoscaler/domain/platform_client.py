from abc import ABC, abstractmethod

from simple_autoscaler.domain.app_snapshot import AppSnapshot


class PlatformClient(ABC):
    @abstractmethod
    def fetch_apps(self) -> dict[str, AppSnapshot]:
        pass

    @abstractmethod
    def scale(self, app: AppSnapshot, desired: int) -> None:
        pass

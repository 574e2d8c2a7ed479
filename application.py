from dataclasses import dataclass
from typing import Dict, Any

from constants import TIMEOUT, MAX_WORKERS, UPDATE_INTERVAL


@dataclass
class TrackerPrefs:
    timeout: float = TIMEOUT  # seconds, per query
    max_workers: int = MAX_WORKERS  # 1 = query endpoints one after another
    update_interval: int = UPDATE_INTERVAL  # seconds between passes in watch mode

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeout": self.timeout,
            "max_workers": self.max_workers,
            "update_interval": self.update_interval,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TrackerPrefs":
        return TrackerPrefs(
            timeout=max(0.1, float(d.get("timeout", TIMEOUT))),
            max_workers=max(1, int(d.get("max_workers", MAX_WORKERS))),
            update_interval=max(1, int(d.get("update_interval", UPDATE_INTERVAL))),
        )

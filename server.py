from typing import Dict, Any
from dataclasses import dataclass

from constants import DEFAULT_PORT


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int = DEFAULT_PORT

    def __post_init__(self):
        if not str(self.host or "").strip():
            raise ValueError("Invalid host")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError("Port must be numeric")
        if not (1 <= self.port <= 65535):
            raise ValueError("Port out of range")

    @property
    def address(self):
        return self.host, self.port

    @property
    def label(self) -> str:
        return f"{self.host}:{self.port}"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Endpoint":
        host = str(d.get("host", "")).strip()
        port_val = d.get("port", DEFAULT_PORT)
        if isinstance(port_val, (bool, float)):
            raise ValueError("Port must be an integer")
        try:
            port = int(port_val)
        except (TypeError, ValueError):
            raise ValueError("Port must be numeric")
        return Endpoint(host=host, port=port)

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}

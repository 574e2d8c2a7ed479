import os
import json
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from application import TrackerPrefs
from constants import SERVERS_FILENAME, PREFS_FILENAME, DEFAULT_PORT
from server import Endpoint

log = logging.getLogger(__name__)


# helpers
def now_utc_hms() -> str:
    return datetime.now(timezone.utc).strftime("%H:%M:%S")

def fmt_hms_from_seconds(seconds: float) -> str:
    seconds = max(0, int(seconds))
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}h {m:02d}m"
    if m > 0:
        return f"{m}m {s:02d}s"
    return f"{s}s"

def parse_address(addr: str) -> Tuple[str, int]:
    addr = (addr or "").strip()
    if not addr:
        raise ValueError("Empty address")

    if ":" in addr:
        host, port_s = addr.rsplit(":", 1)
        host = host.strip()
        port_s = port_s.strip()
        if not host:
            raise ValueError("Invalid host")
        if not port_s.isdigit():
            raise ValueError("Port must be numeric")
        port = int(port_s)
        if not (1 <= port <= 65535):
            raise ValueError("Port out of range")
        return host, port

    return addr, DEFAULT_PORT

def parse_endpoint(addr: str) -> Endpoint:
    host, port = parse_address(addr)
    return Endpoint(host, port)

# saved endpoints, read only here
def load_servers(path: str = SERVERS_FILENAME) -> List[Endpoint]:
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("could not read %s: %s", path, e)
        return []
    if not isinstance(data, list):
        return []
    out: List[Endpoint] = []
    seen = set()
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            ep = Endpoint.from_dict(item)
        except ValueError as e:
            log.warning("skipping saved server %r: %s", item, e)
            continue
        if ep in seen:
            continue
        seen.add(ep)
        out.append(ep)
    return out

def load_prefs(path: Optional[str] = None) -> TrackerPrefs:
    p = path or PREFS_FILENAME
    if not os.path.exists(p):
        return TrackerPrefs()
    try:
        with open(p, "r", encoding="utf-8") as f:
            d = json.load(f)
        if isinstance(d, dict):
            return TrackerPrefs.from_dict(d)
    except (OSError, ValueError, TypeError) as e:
        log.warning("could not read %s: %s", p, e)
    return TrackerPrefs()

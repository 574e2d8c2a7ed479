import sys
import time
import logging
import argparse
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

from constants import APP_NAME, APP_VERSION, TIMEOUT, MAX_WORKERS, SERVERS_FILENAME
from infoQuery import query_info
from playerQuery import query_players
from polls import ErrorKind, Failure, QueryError, QueryOutcome, Success
from server import Endpoint
from utils import fmt_hms_from_seconds, load_prefs, load_servers, now_utc_hms, parse_endpoint

log = logging.getLogger(__name__)

RULE = "═══════════════════════════════════════"
SEPARATOR = "───────────────────────────────────────"


def query_endpoint(endpoint: Endpoint, timeout: float = TIMEOUT) -> QueryOutcome:
    """Run the info query, then the player query, against one endpoint.

    Each query gets its own socket and its own deadline. The player list is
    only requested once the info query answered. Never raises ``QueryError``:
    the first failure becomes the ``Failure`` outcome for this endpoint.
    """
    try:
        info = query_info(endpoint, timeout)
        players = query_players(endpoint, timeout)
    except QueryError as e:
        log.warning("%s failed: %s", endpoint.label, e)
        return Failure.from_error(e)
    log.info("%s ok: %s (%d/%d)", endpoint.label, info.server_name, len(players), info.max_players)
    return Success(info=info, players=players)


def query_all(
    endpoints: Iterable[Endpoint],
    timeout: float = TIMEOUT,
    max_workers: int = MAX_WORKERS,
) -> List[Tuple[Endpoint, QueryOutcome]]:
    """One pass over all endpoints, results in input order.

    ``max_workers <= 1`` queries one endpoint after another, otherwise
    endpoints run concurrently on a thread pool. Results only travel back
    through futures; workers share no state.
    """
    endpoints = list(endpoints)
    if max_workers <= 1 or len(endpoints) <= 1:
        return [(ep, query_endpoint(ep, timeout)) for ep in endpoints]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(endpoints))) as executor:
        futures = [executor.submit(query_endpoint, ep, timeout) for ep in endpoints]
        return [(ep, fut.result()) for ep, fut in zip(endpoints, futures)]


# report
def format_outcome(endpoint: Endpoint, outcome: QueryOutcome) -> List[str]:
    lines: List[str] = []
    if isinstance(outcome, Failure):
        lines.append(f"  [X] {endpoint.label}")
        if outcome.kind is ErrorKind.TIMEOUT:
            lines.append("      Timeout - Server not responding")
        else:
            lines.append(f"      Error: {outcome.detail or outcome.kind.value}")
        lines.append("")
        lines.append(SEPARATOR)
        lines.append("")
        return lines

    info, players = outcome.info, outcome.players
    lines.append(f"  Server: {endpoint.label}")
    lines.append(f"  Name  : {info.server_name}")
    lines.append(f"  Map   : {info.map_name}")
    lines.append(f"  Players: {len(players)}/{info.max_players}")
    if players:
        lines.append("")
        for i, p in enumerate(players, start=1):
            name = p.name or "(Unnamed)"
            lines.append(f"    {i:02d}. {name}  [{fmt_hms_from_seconds(p.duration)}]")
    else:
        lines.append("    No players online.")
    lines.append("")
    lines.append(SEPARATOR)
    lines.append("")
    return lines


def format_report(results: Sequence[Tuple[Endpoint, QueryOutcome]]) -> List[str]:
    lines = [RULE, "          SERVER TRACKING", RULE, ""]
    for endpoint, outcome in results:
        lines.extend(format_outcome(endpoint, outcome))
    lines.append(f"  [+] Query completed at {now_utc_hms()} UTC.")
    lines.append("")
    return lines


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"{APP_NAME} {APP_VERSION}: query game servers for info and players.")
    parser.add_argument("servers", nargs="*", metavar="HOST[:PORT]",
                        help=f"Servers to query (default: entries of {SERVERS_FILENAME})")
    parser.add_argument("--servers-file", default=SERVERS_FILENAME, help="Saved servers JSON file")
    parser.add_argument("--prefs", default=None, help="Preferences JSON file")
    parser.add_argument("--timeout", type=float, default=None, help="Per query timeout in seconds")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent endpoints (1 = sequential)")
    parser.add_argument("--watch", action="store_true", help="Repeat the pass until interrupted")
    parser.add_argument("--interval", type=int, default=None,
                        help="Seconds between passes in watch mode (implies --watch)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log datagrams and state changes")
    return parser


def main(argv: Optional[Sequence[str]] = None, out=None) -> int:
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    prefs = load_prefs(args.prefs)
    timeout = args.timeout if args.timeout is not None else prefs.timeout
    workers = args.workers if args.workers is not None else prefs.max_workers
    interval = args.interval if args.interval is not None else prefs.update_interval
    watch = args.watch or args.interval is not None

    try:
        endpoints = [parse_endpoint(s) for s in args.servers]
    except ValueError as e:
        print(f"  [!] {e}", file=out)
        return 2
    if not endpoints:
        endpoints = load_servers(args.servers_file)
    if not endpoints:
        print("  [!] No servers found. Add one first!", file=out)
        return 2

    while True:
        results = query_all(endpoints, timeout=timeout, max_workers=workers)
        print("\n".join(format_report(results)), file=out, flush=True)
        if not watch:
            break
        time.sleep(max(1, interval))

    return 0 if all(outcome.ok for _, outcome in results) else 1


def run() -> None:
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        raise SystemExit(130)


if __name__ == "__main__":
    run()

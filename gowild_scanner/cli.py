"""Command-line interface for the GoWild scanner"""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import orjson
from loguru import logger

from . import __version__
from .airports import FRONTIER_AIRPORTS, search_airports
from .browser_pool import BrowserSlotPool
from .cache import ResultCache
from .config import (
    BATCH_WAIT_SLACK,
    CACHE_DB_FILENAME,
    COOKIES_FILENAME,
    DATA_DIR,
    DEBUG_DIRNAME,
    DEFAULT_MAX_DESTINATIONS,
    LOGIN_POLL_INTERVAL,
    LOGIN_TIMEOUT,
    MAX_BROWSERS,
)
from .exceptions import (
    GoWildScannerError,
    InvalidRequestError,
    LoginFlowError,
    NotAuthenticatedError,
    RateLimitError,
)
from .logging_config import setup_logging
from .login_flow import LoginFlow
from .models import LoginState, PollStatus
from .orchestrator import ScanOrchestrator
from .scanner import ScanEngine
from .service import ScanService
from .session_store import SessionStore
from .storage import DebugArtifactStorage
from .validation import parse_date_list

EXIT_ERROR = 1
EXIT_INVALID_REQUEST = 2
EXIT_NOT_AUTHENTICATED = 3
EXIT_RATE_LIMITED = 4


@dataclass
class Components:
    """Everything a command needs, wired from one data directory"""

    session_store: SessionStore
    cache: ResultCache
    engine: ScanEngine
    orchestrator: ScanOrchestrator
    service: ScanService


def build_components(data_dir: Path, max_browsers: int = MAX_BROWSERS) -> Components:
    session_store = SessionStore(cookie_file=data_dir / COOKIES_FILENAME)
    cache = ResultCache(db_path=data_dir / CACHE_DB_FILENAME)
    engine = ScanEngine(
        session_store,
        pool=BrowserSlotPool(max_browsers),
        debug_storage=DebugArtifactStorage(data_dir / DEBUG_DIRNAME),
    )
    orchestrator = ScanOrchestrator(engine, cache)
    service = ScanService(session_store, orchestrator)
    return Components(session_store, cache, engine, orchestrator, service)


async def write_report(report: Dict[str, Any], output: Optional[Path]) -> None:
    """Write a JSON report to a file, or to stdout when no file is given"""
    json_bytes = orjson.dumps(report, option=orjson.OPT_INDENT_2)

    if output is None:
        sys.stdout.write(json_bytes.decode("utf-8") + "\n")
        sys.stdout.flush()
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(output, "wb") as f:
        await f.write(json_bytes)
    logger.info(f"💾 Saved report: {output} ({len(json_bytes) / 1024:.1f}KB)")


async def run_login(components: Components, poll_interval: float, timeout: float) -> int:
    """Open the login browser and poll until the user finishes, fails or times out"""
    flow = LoginFlow(components.session_store)
    await flow.start()
    logger.info("Log in to Frontier in the browser window that just opened...")

    elapsed = 0.0
    try:
        while elapsed < timeout:
            status = await flow.poll()

            if status.status == PollStatus.LOGGED_IN.value:
                logger.success(status.message)
                return 0
            if status.status in (PollStatus.ERROR.value, PollStatus.NO_BROWSER.value):
                logger.error(f"Login failed: {status.message}")
                return EXIT_ERROR

            await asyncio.sleep(poll_interval)
            elapsed += poll_interval

        logger.error(f"Login not completed within {timeout:.0f}s")
        return EXIT_ERROR
    finally:
        if flow.state != LoginState.LOGGED_IN:
            await flow.cancel()


async def run_validate(components: Components) -> int:
    if not components.session_store.has_valid_credential():
        raise NotAuthenticatedError()

    result = await components.session_store.validate()
    await write_report({"valid": result.valid, "message": result.reason}, None)
    return 0 if result.valid else EXIT_NOT_AUTHENTICATED


async def run_scan(components: Components, args: argparse.Namespace) -> int:
    origins = args.origins or ([args.origin] if args.origin else [])
    destinations = args.destinations or ([args.destination] if args.destination else [])

    reports = []
    for i, date in enumerate(args.dates):
        report = await components.service.outbound(
            origins, destinations, date, nonstop_only=args.nonstop_only
        )
        summary = report.summary
        logger.info(
            f"{date}: {summary['totalRoutes']} routes, {summary['totalFlights']} flights, "
            f"{summary['goWildFlights']} GoWild, {summary['cachedResults']} cached, "
            f"{summary['errors']} errors"
        )
        reports.append(report.to_dict())

        if i < len(args.dates) - 1:
            # Respect the batch interval between dates
            wait = components.service.rate_limiter.remaining()
            if wait > 0:
                await asyncio.sleep(wait + BATCH_WAIT_SLACK)

    await write_report(reports[0] if len(reports) == 1 else {"reports": reports}, args.output)
    return 0


async def run_anywhere(components: Components, args: argparse.Namespace) -> int:
    report = await components.service.anywhere(args.origin, args.date, args.max_destinations)
    summary = report.summary
    logger.info(
        f"{report.origin}: {summary['destinationsScanned']} destinations, "
        f"{summary['routesWithFlights']} with flights, {summary['goWildFlights']} GoWild"
    )
    await write_report(report.to_dict(), args.output)
    return 0


async def run_cache(components: Components, action: str) -> int:
    if action == "cleanup":
        removed = components.orchestrator.clear_expired()
        await write_report({"success": True, "cleanedEntries": removed}, None)
    else:
        await write_report({"success": True, "stats": components.cache.stats()}, None)
    return 0


def _print_status(components: Components) -> int:
    status = components.session_store.status()
    saved_at = status["saved_at"]
    if status["logged_in"]:
        saved = datetime.fromtimestamp(saved_at / 1000).isoformat(timespec="seconds") if saved_at else "unknown"
        logger.info(f"Logged in ({status['cookie_count']} cookies, saved {saved})")
    else:
        logger.info("Not logged in")
    sys.stdout.write(orjson.dumps(
        {"loggedIn": status["logged_in"], "savedAt": saved_at, "cookieCount": status["cookie_count"]}
    ).decode("utf-8") + "\n")
    return 0


def _print_airports(query: Optional[str]) -> int:
    airports = search_airports(query) if query else FRONTIER_AIRPORTS
    payload = {
        "airports": [
            {"code": a.code, "name": a.name, "city": a.city, "state": a.state} for a in airports
        ]
    }
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return 0


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gowild-scanner",
        description="Frontier GoWild availability scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--data-dir", type=str, default=str(DATA_DIR), help="Session, cache and debug directory"
    )
    config_group.add_argument("--verbose", action="store_true", help="Debug logging")
    config_group.add_argument("--log-file", type=str, help="Log file path")

    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Log in through a visible browser")
    login.add_argument(
        "--poll-interval", type=float, default=LOGIN_POLL_INTERVAL, help="Seconds between login checks"
    )
    login.add_argument(
        "--timeout", type=float, default=LOGIN_TIMEOUT, help="Give up after this many seconds"
    )

    subparsers.add_parser("logout", help="Delete the stored session")
    subparsers.add_parser("status", help="Show whether a session is stored")
    subparsers.add_parser("validate", help="Check the stored session against the site")

    scan = subparsers.add_parser("scan", help="Scan origin(s) x destination(s)")
    scan.add_argument("--origin", type=str, help="Origin airport code")
    scan.add_argument("--origins", type=str, nargs="+", help="Multiple origin airport codes")
    scan.add_argument("--destination", type=str, help="Destination airport code")
    scan.add_argument("--destinations", type=str, nargs="+", help="Multiple destination airport codes")
    scan.add_argument(
        "--date", "--dates",
        dest="dates",
        nargs="+",
        required=True,
        help="Departure date(s) YYYY-MM-DD or range YYYY-MM-DD:YYYY-MM-DD",
    )
    scan.add_argument("--nonstop-only", action="store_true", help="Only report nonstop flights")
    scan.add_argument("--output", type=str, help="Write the JSON report here instead of stdout")
    scan.add_argument(
        "--browsers", type=positive_int, default=MAX_BROWSERS, help=f"Concurrent browsers (default: {MAX_BROWSERS})"
    )

    anywhere = subparsers.add_parser("anywhere", help="Scan one origin against many destinations")
    anywhere.add_argument("--origin", type=str, required=True, help="Origin airport code")
    anywhere.add_argument("--date", type=str, required=True, help="Departure date YYYY-MM-DD")
    anywhere.add_argument(
        "--max-destinations",
        type=int,
        default=DEFAULT_MAX_DESTINATIONS,
        help=f"Destinations to probe (default: {DEFAULT_MAX_DESTINATIONS})",
    )
    anywhere.add_argument("--output", type=str, help="Write the JSON report here instead of stdout")
    anywhere.add_argument(
        "--browsers", type=positive_int, default=MAX_BROWSERS, help=f"Concurrent browsers (default: {MAX_BROWSERS})"
    )

    airports = subparsers.add_parser("airports", help="List known airports")
    airports.add_argument("--query", "-q", type=str, help="Filter by code, city or name")

    cache = subparsers.add_parser("cache", help="Inspect or sweep the result cache")
    cache.add_argument("action", choices=["cleanup", "stats"])

    return parser


def main() -> None:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args()

    log_file = Path(args.log_file) if args.log_file else None
    setup_logging(verbose=args.verbose, log_file=log_file)

    if args.command == "airports":
        sys.exit(_print_airports(args.query))

    if args.command == "scan":
        try:
            args.dates = parse_date_list(args.dates)
        except ValueError as e:
            logger.error(f"Invalid date specification: {e}")
            sys.exit(EXIT_INVALID_REQUEST)

    if getattr(args, "output", None):
        args.output = Path(args.output)

    data_dir = Path(args.data_dir)

    components = build_components(data_dir, max_browsers=getattr(args, "browsers", MAX_BROWSERS))

    async def run() -> int:
        if args.command == "login":
            return await run_login(components, args.poll_interval, args.timeout)
        if args.command == "logout":
            components.session_store.delete()
            logger.success("Logged out")
            return 0
        if args.command == "status":
            return _print_status(components)
        if args.command == "validate":
            return await run_validate(components)
        if args.command == "scan":
            return await run_scan(components, args)
        if args.command == "anywhere":
            return await run_anywhere(components, args)
        return await run_cache(components, args.action)

    try:
        exit_code = asyncio.run(run())
    except NotAuthenticatedError as e:
        logger.error(f"{e} Run: gowild-scanner login")
        exit_code = EXIT_NOT_AUTHENTICATED
    except RateLimitError as e:
        logger.error(str(e))
        exit_code = EXIT_RATE_LIMITED
    except InvalidRequestError as e:
        logger.error(str(e))
        for detail in e.details:
            logger.error(f"   • {detail}")
        exit_code = EXIT_INVALID_REQUEST
    except LoginFlowError as e:
        logger.error(str(e))
        exit_code = EXIT_ERROR
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        exit_code = EXIT_ERROR
    except GoWildScannerError as e:
        logger.error(str(e))
        exit_code = EXIT_ERROR
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        exit_code = EXIT_ERROR
    finally:
        components.cache.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

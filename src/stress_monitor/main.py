"""Application entrypoint — start the API server or run one-off commands."""

from __future__ import annotations

import argparse
import asyncio
import sys

import uvicorn

from stress_monitor.config import Settings, get_settings
from stress_monitor.logger import setup_logging
from stress_monitor.models import MonitoringState, UserProfile
from stress_monitor.monitor import build_monitor
from stress_monitor.relaxation import suggestion_for
from stress_monitor.storage.database import dispose_engine, init_db


async def _run_monitor(settings: Settings, address: str, user: str, cycles: int | None) -> int:
    """Connect, monitor in the terminal and print one line per scored sample."""
    await init_db()
    monitor = build_monitor(settings, user=UserProfile(name=user, age=settings.user_age))
    try:
        result = await monitor.connect(address)
        if not result.ok:
            print(f"Connection failed: {result.diagnostic}")
            return 1
        print(f"Connected to {result.address}")

        await monitor.start_monitoring()
        seen = 0
        last = None
        while cycles is None or seen < cycles:
            await asyncio.sleep(settings.poll_interval_ms / 4000)
            snapshot = monitor.get_session_state()
            if snapshot.monitoring_state == MonitoringState.STOPPED_ON_ERROR:
                print(f"Monitoring stopped: {snapshot.diagnostic}")
                return 1
            latest = snapshot.latest
            if latest is None or latest is last:
                continue
            last = latest
            seen += 1
            line = (
                f"{latest.timestamp:%H:%M:%S}  score={latest.score:5.1f}  "
                f"smoothed={snapshot.smoothed_score:5.1f}  band={latest.band.value:<8}  "
                f"gsr={latest.sample.gsr:g}  temp={latest.sample.temperature_c:g}C  "
                f"hrv={latest.sample.hrv_ms:g}ms"
            )
            print(line)
            suggestion = suggestion_for(latest.band)
            if suggestion:
                print(f"  Suggestion: {suggestion}")
    finally:
        await monitor.close()
        await dispose_engine()
    return 0


async def _print_history(settings: Settings, user: str | None) -> None:
    await init_db()
    monitor = build_monitor(settings)
    try:
        entries = await monitor.get_history(user)
    finally:
        await monitor.close()
        await dispose_engine()
    if not entries:
        print("No history recorded.")
        return
    for entry in reversed(entries):
        print(f"{entry.timestamp}  {entry.user_name:<16}  {entry.stress_score:>3}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="stress-monitor",
        description="Biometric stress monitoring engine.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── serve ─────────────────────────────────────────────────
    serve_parser = sub.add_parser("serve", help="Start the API server.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")

    # ── init-db ───────────────────────────────────────────────
    sub.add_parser("init-db", help="Create database tables.")

    # ── monitor ───────────────────────────────────────────────
    monitor_parser = sub.add_parser("monitor", help="Monitor a device from the terminal.")
    monitor_parser.add_argument("--address", default=None, help="Device host or IP.")
    monitor_parser.add_argument("--user", default=None, help="Name used to tag history.")
    monitor_parser.add_argument("--cycles", type=int, default=None, help="Stop after N samples.")

    # ── history ───────────────────────────────────────────────
    history_parser = sub.add_parser("history", help="Print stored stress history.")
    history_parser.add_argument("--user", default=None)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "serve":
        uvicorn.run(
            "stress_monitor.api.server:app",
            host=args.host or settings.api_host,
            port=args.port or settings.api_port,
            reload=args.reload,
        )
    elif args.command == "init-db":
        asyncio.run(init_db())
        print("Database tables created.")
    elif args.command == "monitor":
        address = args.address or settings.device_address
        if not address:
            parser.error("--address is required when DEVICE_ADDRESS is not set")
        code = asyncio.run(
            _run_monitor(settings, address, args.user or settings.user_name, args.cycles)
        )
        sys.exit(code)
    elif args.command == "history":
        asyncio.run(_print_history(settings, args.user))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

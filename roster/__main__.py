from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List

import uvicorn

from roster.actions import Alert, rebuild_combined_table, refresh_all_seasons, refresh_season, show_help
from roster.config import load_config, workbook_path
from roster.errors import ConfigError
from roster.store import ExcelTableStore


def _print_alert(alert: Alert) -> None:
    print(f"[{alert.level.upper()}] {alert.title}: {alert.message}")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="roster", description="Build seasonal and combined roster sheets.")
    parser.add_argument("command", choices=["refresh", "refresh-all", "combine", "run-all", "serve", "help"])
    parser.add_argument("--season", help="Season key for 'refresh' (fall, winter, spring)")
    parser.add_argument("--workbook", help="Workbook path (defaults to ROSTER_WORKBOOK)")
    parser.add_argument("--config", help="JSON config path (defaults to ROSTER_CONFIG)")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for 'serve'")
    parser.add_argument("--port", type=int, default=8000, help="Port for 'serve'")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"Invalid config: {exc}")

    if args.command == "help":
        print(show_help(config))
        return 0
    if args.command == "serve":
        # The API resolves workbook and config from the environment per request.
        if args.workbook:
            os.environ["ROSTER_WORKBOOK"] = args.workbook
        if args.config:
            os.environ["ROSTER_CONFIG"] = args.config
        uvicorn.run("api.main:app", host=args.host, port=args.port, log_level=args.log_level.lower())
        return 0
    if args.command == "refresh" and not args.season:
        parser.error("refresh needs --season")

    store = ExcelTableStore(workbook_path(args.workbook))
    alerts: List[Alert] = []
    if args.command == "refresh":
        alerts.append(refresh_season(store, config, args.season))
    if args.command in {"refresh-all", "run-all"}:
        alerts.extend(refresh_all_seasons(store, config))
    if args.command in {"combine", "run-all"}:
        alerts.append(rebuild_combined_table(store, config))

    for alert in alerts:
        _print_alert(alert)
    return 1 if any(a.level == "error" for a in alerts) else 0


if __name__ == "__main__":
    sys.exit(main())

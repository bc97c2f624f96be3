"""Command line entry point"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..supervisor import Supervisor
from ..utils import RelayConfig, configure_logging, get_logger

logger = get_logger("inspector_relay.cli")

EPILOG = """\
environment variables:
  UI_PORT                 port for the UI server
  WS_PORT                 port for the WebSocket relay
  UI_PATH                 path for the UI endpoint
  INSPECTOR_HOST          address both servers listen on
  INSPECTOR_LOG_LEVEL     log level
  INSPECTOR_LOG_FILE      also write logs to this file
  INSPECTOR_RICH_LOGGING  set to "false" for plain log output

examples:
  http-inspector-relay
  http-inspector-relay --ui-port 3002 --ws-port 8081
  http-inspector-relay --ui-only --ui-port 3003
  http-inspector-relay --ws-only --ws-port 8082
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="http-inspector-relay",
        description="HTTP Inspector relay: live network monitor for your application",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--ui-port", type=int, help="port for the UI server (default: 3001)")
    parser.add_argument("--ws-port", type=int, help="port for the WebSocket relay (default: 8080)")
    parser.add_argument("--ui-path", help="path for the UI endpoint (default: /ui)")
    parser.add_argument("--host", help="address to listen on (default: localhost)")
    parser.add_argument("--log-level", help="log level (default: INFO)")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--ui-only", action="store_true", help="start only the UI server")
    mode.add_argument("--ws-only", action="store_true", help="start only the WebSocket relay")
    return parser


def load_config(argv: Optional[List[str]] = None) -> RelayConfig:
    """Resolve the configuration from arguments and environment

    Args:
        argv: Arguments, ``sys.argv[1:]`` when omitted

    Returns:
        Resolved configuration
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        parser.error(f"invalid environment value: {e}")

    config.update(
        ui_port=args.ui_port,
        ws_port=args.ws_port,
        ui_path=args.ui_path,
        host=args.host,
        log_level=args.log_level,
        ui_only=args.ui_only or None,
        ws_only=args.ws_only or None,
    )
    return config


def print_banner(config: RelayConfig, console: Optional[Console] = None) -> None:
    console = console or Console()

    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    if not config.ws_only:
        table.add_row("UI", f"http://{config.host}:{config.ui_port}{config.ui_path}")
        table.add_row("Log endpoint", f"http://{config.host}:{config.ui_port}/api/logs")
    if not config.ui_only:
        table.add_row("Relay", f"ws://{config.host}:{config.ws_port}")

    console.print(Panel(table, title="HTTP Inspector", subtitle="Ctrl+C to stop"))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the servers until interrupted

    Returns:
        Process exit status
    """
    config = load_config(argv)
    configure_logging(config.log_level, config.log_file, config.enable_rich_logging)
    logger.debug(f"Configuration: {config.to_dict()}")

    supervisor = Supervisor(config)

    async def _run() -> int:
        run_task = asyncio.create_task(supervisor.run())
        started = asyncio.create_task(supervisor.started.wait())
        await asyncio.wait({run_task, started}, return_when=asyncio.FIRST_COMPLETED)
        if supervisor.started.is_set():
            print_banner(config)
        started.cancel()
        return await run_task

    try:
        return asyncio.run(_run())
    except KeyboardInterrupt:
        return 0
    except Exception:
        logger.exception("Application error")
        return 1


def run() -> None:
    sys.exit(main())

from __future__ import annotations

import argparse
import signal
from typing import Any

from taskledger.config import LedgerConfig, load_config
from taskledger.observability import get_json_logger
from taskledger.rollup.client import RollupClient
from taskledger.rollup.dispatcher import Dispatcher

_should_exit = False


def _handle_exit(signum: int, frame: Any) -> None:
    global _should_exit
    _should_exit = True


def run_dispatcher(cfg: LedgerConfig) -> None:
    """Poll the rollup server until SIGTERM/SIGINT."""
    logger = get_json_logger("taskledger")
    signal.signal(signal.SIGTERM, _handle_exit)
    signal.signal(signal.SIGINT, _handle_exit)
    logger.info(
        "dispatcher starting",
        extra={"event": "dispatcher_started", "kv": {"rollup_url": cfg.rollup_url}},
    )
    with RollupClient(cfg.rollup_url, timeout=cfg.http_timeout) as client:
        dispatcher = Dispatcher(client)
        dispatcher.run(
            should_stop=lambda: _should_exit,
            min_sleep=cfg.poll_min_sleep,
            max_sleep=cfg.poll_max_sleep,
        )
    logger.info("dispatcher stopped", extra={"event": "dispatcher_stopped"})


def run_devserver(cfg: LedgerConfig) -> None:
    import uvicorn  # defer import; only the dev server needs it

    from taskledger.devserver.app import create_app

    uvicorn.run(create_app(), host=cfg.devserver_host, port=cfg.devserver_port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser("taskledger")
    sub = parser.add_subparsers(dest="cmd")

    p_run = sub.add_parser("run", help="Poll the rollup server and process requests (default)")
    p_run.add_argument("--rollup-url", help="Override ROLLUP_HTTP_SERVER_URL")

    p_dev = sub.add_parser("devserver", help="Serve a local rollup server for development")
    p_dev.add_argument("--host")
    p_dev.add_argument("--port", type=int)

    args = parser.parse_args(argv)
    cmd = str(getattr(args, "cmd", None) or "run")
    cfg = load_config()

    if cmd == "run":
        if getattr(args, "rollup_url", None):
            cfg.rollup_url = args.rollup_url.rstrip("/")
        run_dispatcher(cfg)
        return

    if cmd == "devserver":
        if args.host:
            cfg.devserver_host = args.host
        if args.port:
            cfg.devserver_port = args.port
        run_devserver(cfg)
        return

    parser.print_help()


if __name__ == "__main__":
    main()

from __future__ import annotations

import asyncio
import time
from os import environ, getenv
from socket import socket

import click
import hupper
import uvloop
from dotenv import load_dotenv

from . import __version__
from .environment import running_in_pytest
from .logs import configure_logging
from .metrics import no_metrics
from .settings import settings

# load .env environment variables as early as possible
if not running_in_pytest():  # pragma: no cover
    load_dotenv()

if not getenv("DISABLE_UVLOOP", ""):  # pragma: no cover
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())


@click.command()
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]),
    default=None,
    help="INFO is not set, can also be set by the LOG_LEVEL environment variable.",
)
@click.option(
    "-d",
    "--dev",
    default=False,
    is_flag=True,
    help="Development mode, automatically reload bot when source changes",
)
@click.option(
    "-g",
    "--debug",
    default=False,
    is_flag=True,
    help="Enable detailed asyncio debugging",
)
@click.version_option(version=__version__)
def main(log_level: str | None, dev: bool, debug: bool) -> None:
    if dev:
        hupper.start_reloader("crossroads.main")

    # Ensure that configure_logging() is called as early as possible
    level = log_level if log_level is not None else (getenv("LOG_LEVEL") or "INFO")
    configure_logging(level)

    import logging

    # ddtrace logging is awful and spammy
    ddtrace_logger = logging.getLogger("ddtrace")
    ddtrace_logger.propagate = False
    ddtrace_logger.setLevel(logging.CRITICAL)

    # When metrics are enabled, make sure the datadog agent is up before starting
    if not no_metrics():  # pragma: no cover
        logger = logging.root
        connected = False

        logger.info("metrics enabled, checking for connection to the datadog agent...")
        while not connected:
            conn = socket()
            try:
                conn.connect(("127.0.0.1", 8126))
                logger.info("datadog agent connection established")
                connected = True
            except OSError as e:
                logger.info("datadog agent connection error: %s, retrying...", str(e))
                time.sleep(1)
            finally:
                conn.close()

    from .client import build_bot

    if not settings.BOT_TOKEN:
        raise click.UsageError("BOT_TOKEN must be set to run the bot")
    if debug:
        # read by asyncio when the bot creates its event loop
        environ["PYTHONASYNCIODEBUG"] = "1"
        logging.getLogger("asyncio").setLevel(logging.DEBUG)
    bot = build_bot()
    bot.run(settings.BOT_TOKEN, log_handler=None)

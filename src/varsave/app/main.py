"""Main entry point — ``python3 -m varsave.app.main``."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Sequence

from varsave.app.bootstrap import SaveServiceContext, create_context, start_trigger_loop
from varsave.app.cli import apply_overrides, parse_args
from varsave.app.settings import SaveServiceSettings
from varsave.domain.errors import ConfigurationError, StartupError
from varsave.infrastructure.adapters.systemd_notify import notify_ready, notify_stopping

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def serve(context: SaveServiceContext, shutdown: asyncio.Event) -> int:
    """Run the trigger loop until ``shutdown`` is set, then release the registry.

    Returns the process exit status. The trigger loop never finishes on its
    own, so every path out of here is abnormal termination.
    """
    if context.trigger_loop is None:
        raise RuntimeError("serve() requires a started trigger loop")

    loop_task = asyncio.create_task(context.trigger_loop.run_forever(), name="trigger-loop")
    stop_task = asyncio.create_task(shutdown.wait(), name="shutdown-wait")
    if context.console is not None:
        context.console.start(asyncio.get_running_loop())

    notify_ready(f"Waiting for {context.settings.trigger_variable}")

    try:
        await asyncio.wait({loop_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (loop_task, stop_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(loop_task, stop_task, return_exceptions=True)
        notify_stopping()
        await context.close()

    if not loop_task.cancelled() and loop_task.exception() is not None:
        logger.error("Trigger loop stopped unexpectedly: %s", loop_task.exception())
    else:
        logger.error("Abnormal termination of save service")
    return EXIT_FAILURE


async def run(argv: Sequence[str] | None = None) -> int:
    """Parse options, start the service, and serve until terminated."""
    args = parse_args(argv)

    try:
        settings = apply_overrides(SaveServiceSettings(), args)
    except ValueError as exc:
        logging.basicConfig(stream=sys.stderr)
        logger.error("Invalid configuration: %s", exc)
        return EXIT_FAILURE

    configure_logging(settings.verbose)

    try:
        context = await create_context(settings)
    except ConfigurationError as exc:
        logger.error("%s", exc.message)
        return EXIT_FAILURE

    try:
        await start_trigger_loop(context)
    except StartupError as exc:
        logger.error("%s", exc.message)
        await context.close()
        return EXIT_FAILURE

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in TERMINATION_SIGNALS:
        loop.add_signal_handler(signum, _request_shutdown, shutdown, signum)

    try:
        return await serve(context, shutdown)
    finally:
        for signum in TERMINATION_SIGNALS:
            loop.remove_signal_handler(signum)


def _request_shutdown(shutdown: asyncio.Event, signum: int) -> None:
    logger.warning("Received %s, shutting down", signal.Signals(signum).name)
    shutdown.set()


def main() -> None:
    """Synchronous entry point for systemd."""
    try:
        status = asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Save service interrupted")
        status = EXIT_FAILURE
    sys.exit(status)


if __name__ == "__main__":
    main()

"""
Festive Bot entrypoint.

Owns:
- environment (.env) and configuration loading
- the shared HTTP client
- termination signal handling
- the fatal-error status report and process exit code
"""

import asyncio
import signal
import sys
from typing import Optional, Sequence

import httpx
from dotenv import load_dotenv

from core.cycle import NotifyCycle
from core.errors import ConfigMissingError, InitError
from core.scheduler import SystemClock, TriggerScheduler
from runtime.version import as_string, user_agent
from services.adventofcode.api.leaderboard import LeaderboardAPI
from services.discord.announcements import AnnouncementManager
from services.discord.webhook import WebhookChannel, WebhookDispatcher
from shared.config.settings import FestiveConfig, load_config
from shared.logging.logger import get_logger
from shared.storage.checkpoints import CheckpointStore

log = get_logger("core.app")

HTTP_TIMEOUT = 30.0


def build_cycle(
    config: FestiveConfig,
    client: httpx.AsyncClient,
    clock=None,
) -> NotifyCycle:
    clock = clock or SystemClock()
    dispatcher = WebhookDispatcher(
        urls={
            WebhookChannel.NOTIFY: config.notify_url,
            WebhookChannel.STATUS: config.status_url,
        },
        client=client,
        sleep=clock.sleep,
    )
    return NotifyCycle(
        config=config,
        api=LeaderboardAPI(
            leaderboard=config.leaderboard,
            session=config.session,
            client=client,
        ),
        announcements=AnnouncementManager(dispatcher),
        checkpoints=CheckpointStore(config.state_dir, config.leaderboard),
        scheduler=TriggerScheduler(config.period, clock),
    )


async def main(stop_event: asyncio.Event, argv: Optional[Sequence[str]] = None) -> int:
    # --------------------------------------------------
    # ENV + CONFIG
    # --------------------------------------------------
    load_dotenv()
    log.info(f"{as_string()} booting")

    try:
        config = load_config(argv)
    except ConfigMissingError as e:
        log.error(str(e))
        return 1

    async with httpx.AsyncClient(
        headers={"User-Agent": user_agent()},
        timeout=HTTP_TIMEOUT,
    ) as client:
        cycle = build_cycle(config, client)
        task = asyncio.create_task(cycle.run())
        stopper = asyncio.create_task(stop_event.wait())

        # --------------------------------------------------
        # BLOCK UNTIL FATAL ERROR OR SHUTDOWN SIGNAL
        # --------------------------------------------------
        await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)

        if stopper.done():
            log.info("Received termination signal, exiting...")
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            try:
                await cycle.announcements.terminating()
            except Exception as e:
                log.warning(f"Termination status message failed: {e}")
            return 0

        stopper.cancel()
        error = task.exception()
        if error is None:
            return 0

        log.error(f"Unrecoverable error: {error!r}")
        await cycle.announcements.fatal(error)
        return 1


# ----------------------------------------------------------------------
# SIGNAL HANDLING
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    SIGINT, SIGTERM and (where the platform has it) SIGHUP all unwind
    through stop_event.
    """

    def _handler(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    signals = [signal.SIGINT, signal.SIGTERM]
    if hasattr(signal, "SIGHUP"):
        signals.append(signal.SIGHUP)

    log.debug(f"Setting handler for {[s.name for s in signals]}")
    for signum in signals:
        try:
            signal.signal(signum, _handler)
        except (ValueError, OSError) as e:
            raise InitError(f"Cannot install handler for {signum.name}: {e}") from e


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run(argv: Optional[Sequence[str]] = None) -> int:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    stop_event = asyncio.Event()

    try:
        _install_signal_handlers(loop, stop_event)
        code = loop.run_until_complete(main(stop_event, argv))
    except InitError as e:
        log.error(str(e))
        code = 1
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            loop.close()

    return code


if __name__ == "__main__":
    sys.exit(run())

# Process entrypoint: uvicorn server with graceful SIGTERM drain.
#
# On SIGTERM uvicorn stops accepting connections, waits for in-flight
# requests (no drain timeout), runs the lifespan shutdown, then returns.
# Failing to bind the port exits non-zero during startup.

import signal
import sys
from types import FrameType

import structlog
import uvicorn

from clientinfo.config import Settings, get_settings
from clientinfo.logging_config import configure_logging

logger = structlog.get_logger(__name__)

STARTUP_FAILURE = 3


class GracefulServer(uvicorn.Server):
    """uvicorn.Server that logs which signal started the shutdown."""

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        logger.info(
            "shutdown_signal_received",
            signal=signal.Signals(sig).name,
            draining=not self.should_exit,
        )
        super().handle_exit(sig, frame)


def build_config(settings: Settings) -> uvicorn.Config:
    """uvicorn Config for the app factory, driven by Settings."""
    return uvicorn.Config(
        "clientinfo.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
        server_header=False,
        timeout_graceful_shutdown=None,
        # Logging is ours (structlog); uvicorn's loggers propagate to the root handler.
        log_config=None,
    )


def _exit_after_drain(signum: int, frame: FrameType | None) -> None:
    # Recent uvicorn re-raises the captured SIGTERM after a clean drain.
    sys.exit(0)


def main() -> None:
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    server = GracefulServer(build_config(settings))
    signal.signal(signal.SIGTERM, _exit_after_drain)
    server.run()

    if not server.started:
        logger.critical("server_failed_to_start", host=settings.host, port=settings.port)
        sys.exit(STARTUP_FAILURE)


if __name__ == "__main__":
    main()

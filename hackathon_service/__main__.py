from __future__ import annotations

import argparse
import signal
from types import FrameType

import structlog
import uvicorn

from hackathon_service.config import get_settings
from hackathon_service.observability.logging import configure_logging


def _exit_on_sigterm(signum: int, frame: FrameType | None) -> None:
    """Turn SIGTERM into a clean exit with status 0.

    uvicorn swaps in its own handler while serving and re-raises the captured
    signal once it has drained; this handler is the one it restores.
    """

    _ = frame
    structlog.get_logger("lifecycle").info("sigterm_received", signal=signum)
    raise SystemExit(0)


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Hackathon demo service with chaos endpoints")
    parser.add_argument("--host", default=settings.host, help="Address to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on (env PORT)")
    args = parser.parse_args()

    configure_logging(settings.log_level, service=settings.app_label)

    config = uvicorn.Config(
        "hackathon_service.main:app",
        host=args.host,
        port=args.port,
        log_config=None,
    )
    server = uvicorn.Server(config)

    signal.signal(signal.SIGTERM, _exit_on_sigterm)
    server.run()


if __name__ == "__main__":
    main()

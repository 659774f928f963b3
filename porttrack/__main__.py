from __future__ import annotations

import argparse

import uvicorn

from porttrack.config import get_settings
from porttrack.observability.logging import configure_logging


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="PortTrack monitored port operations API")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    parser.add_argument("--log-level", default=settings.log_level, help="Root log level")
    args = parser.parse_args()

    configure_logging(args.log_level, service=settings.service_name)
    # uvicorn stops accepting connections before running the app's shutdown hook,
    # which drains the telemetry sink.
    uvicorn.run(
        "porttrack.main:app",
        host=args.host,
        port=args.port,
        log_config=None,
        access_log=False,
        timeout_graceful_shutdown=int(settings.telemetry_flush_timeout_seconds) + 1,
    )


if __name__ == "__main__":
    main()

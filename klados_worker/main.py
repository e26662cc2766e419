"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service.
"""

import argparse

import uvicorn

from klados_worker.bootstrap import bootstrap_create_application
from klados_worker.config import config_configure_logging, config_load_settings


def main() -> None:
    """Run the worker HTTP service with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Klados worker runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api",),
        help="Runtime command: `api` starts the worker HTTP server",
        type=str,
    )
    argument_parser.add_argument("--host", dest="host", type=str, help="Optional bind host override")
    argument_parser.add_argument("--port", dest="port", type=int, help="Optional bind port override")
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)
    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=parsed_arguments.host or settings.application_host,
        port=parsed_arguments.port or settings.application_port,
        timeout_graceful_shutdown=int(settings.shutdown_drain_timeout_seconds),
    )


if __name__ == "__main__":
    main()

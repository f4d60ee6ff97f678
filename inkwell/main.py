"""
Inkwell - server entry point.

    python -m inkwell.main
    inkwell-api            (console script)
"""

from __future__ import annotations

import uvicorn

from inkwell.api.app import create_app
from inkwell.config import configure_logging, get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()

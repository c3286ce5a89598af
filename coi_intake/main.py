"""Entry point for the COI intake API server."""

import uvicorn

from coi_intake.api.app import app
from coi_intake.utils.config import load_config
from coi_intake.utils.logger import setup_logging


def main() -> None:
    """Serve the API on the configured host and port."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()

"""Entry point that serves the Slot Booking API with uvicorn.

Host and port are read from the ``HOST`` and ``PORT`` environment
variables (defaults ``0.0.0.0`` and ``5000``).  Everything else is
configured through the variables read by ``slot_booking_api.app.core.config``.

Usage:
    python run.py
"""
import logging
import os

from uvicorn import Config, Server

from slot_booking_api.app.core.config import settings
from slot_booking_api.app.main import app


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    logging.getLogger(__name__).info("Serving on %s:%s with store %s", host, port, settings.resolve_data_path())
    server.run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass

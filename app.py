import logging
import os
import socket

from rank_viewer.ui.dash_app import create_dash_app
from rank_viewer.logging_config import configure_logging

configure_logging()
logger = logging.getLogger("rank_viewer.app")

app = create_dash_app(os.getenv("RANK_VIEWER_CONFIG", "config"))
server = app.server


def port_is_free(port: int, host: str = "localhost") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex((host, port)) != 0


def find_free_port(start_port: int, attempts: int = 100) -> int:
    """First free port in [start_port, start_port + attempts); start_port if none is."""
    for port in range(start_port, start_port + attempts):
        if port_is_free(port):
            return port
    return start_port


def main() -> None:
    preferred_port = int(os.getenv("PORT", "8051"))
    port = find_free_port(preferred_port)
    debug = os.getenv("DEBUG", "0") == "1"

    if port != preferred_port:
        logger.warning("Preferred port taken", extra={"preferred_port": preferred_port, "port": port})

    app.run(host=os.getenv("HOST", "0.0.0.0"), port=port, debug=debug)


if __name__ == "__main__":
    main()

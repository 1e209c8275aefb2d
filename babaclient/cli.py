import argparse
import logging

from .gui import run_client_gui


def main() -> None:
    parser = argparse.ArgumentParser(description="Baba Is You - play on a remote game server")
    parser.add_argument("--server", type=str, default="http://localhost:8080",
                        help="Game server address; https:// selects a secure websocket")
    parser.add_argument("--assets", type=str, default=None,
                        help="Local directory holding the <name>.gif sprites (default: fetch from the server)")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_client_gui(server_url=args.server, assets_dir=args.assets)


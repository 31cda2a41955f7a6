"""Command-line entry point.

Usage:
    # SQLite file in the working directory, 127.0.0.1:3000
    python -m hitcounter

    # Explicit database and bind address
    python -m hitcounter --db-url sqlite:/var/lib/hits.db --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import argparse

import uvicorn

from hitcounter import main as main_module
from hitcounter.config import load_config


def main():
    parser = argparse.ArgumentParser(description="Per-target hit counter server")
    parser.add_argument("--config", default=None,
                        help="Path to config.yaml (default: ./config.yaml if present)")
    parser.add_argument("-d", "--db-url", default=None,
                        help="Database URL, e.g. sqlite:data.db (default: DATABASE_URL or config)")
    parser.add_argument("--host", default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="Bind port")

    args = parser.parse_args()

    config = load_config(args.config)
    if args.db_url:
        config.database.url = args.db_url
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port

    main_module.configure(config)
    uvicorn.run(
        main_module.app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()

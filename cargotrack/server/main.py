"""CLI argument parsing and uvicorn entry point."""

import logging
import os


def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="CargoTrack API Server")
    parser.add_argument("--config", default=None, help="Path to YAML config (default: $CARGOTRACK_CONFIG or config.yaml)")
    parser.add_argument("--host", default=os.getenv("CARGOTRACK_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("CARGOTRACK_PORT", "8000")))
    parser.add_argument("--log-level", default=os.getenv("CARGOTRACK_LOG_LEVEL", "INFO"))
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(levelname)s: %(name)s - %(message)s",
    )

    if args.config:
        os.environ["CARGOTRACK_CONFIG"] = args.config

    from .app import api

    uvicorn.run(api, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

"""CLI argument parsing and uvicorn entry point."""

import logging
import os


def main():
    import argparse
    import uvicorn

    from ..app import AgentContext, load_settings
    from .app import create_api

    parser = argparse.ArgumentParser(description="searchchat API Server")
    parser.add_argument("--config", default=None, help="Path to config.yaml (default: $SEARCHCHAT_CONFIG)")
    parser.add_argument("--host", default=os.getenv("SEARCHCHAT_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SEARCHCHAT_PORT", "8000")))
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    context = AgentContext.from_settings(load_settings(args.config))
    uvicorn.run(create_api(context), host=args.host, port=args.port)


if __name__ == "__main__":
    main()

"""Main entry point for the Xiangqi AI server."""

import argparse
import logging
import os
import uvicorn

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Xiangqi AI Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--ai-time-limit",
        type=float,
        default=None,
        help="Abort AI searches that run longer than this many seconds",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("XIANGQI_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Settings are read by api.py from the environment
    if args.ai_time_limit is not None:
        os.environ["XIANGQI_AI_TIME_LIMIT"] = str(args.ai_time_limit)

    uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)

#!/usr/bin/env python3
"""
Lease Match Engine - API Server

Run this script to start the matching and neighborhood scoring API.

Usage:
    python serve.py [--port PORT] [--host HOST] [--reload]

Example:
    python serve.py --port 8080
"""

import argparse
import logging

import uvicorn


def main():
    parser = argparse.ArgumentParser(
        description="Lease Match Engine - API Server"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)"
    )
    parser.add_argument(
        "--host", "-H",
        type=str,
        default="localhost",
        help="Host to bind to (default: localhost)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run("web.app:app", host=args.host, port=args.port, reload=args.reload,
                log_level=args.log_level)


if __name__ == "__main__":
    main()

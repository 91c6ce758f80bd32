#!/usr/bin/env python3
"""
PromptReel - Main Entry Point

Runs the generation server or talks to a running one.

Usage:
    # Start server mode
    python main.py server

    # Generate from a prompt and wait for the result
    python main.py generate "A lighthouse made of glass at dawn"

    # Follow an existing job
    python main.py status mock_1730000000000_abc123xyz

    # Show backend selection and configuration issues
    python main.py config
"""

import argparse
import asyncio
import json
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("promptreel")


def start_server(host: str, port: int, reload: bool = False):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    logger.info(f"PromptReel server running at http://{host}:{port}")
    uvicorn.run("services.api.server:app", host=host, port=port, reload=reload)


async def generate(prompt: str, server_url: str) -> bool:
    """Submit a prompt and follow it to completion."""
    from cli.progress_monitor import ProgressMonitor

    monitor = ProgressMonitor(server_url=server_url)
    return await monitor.generate(prompt) is not None


async def follow(job_id: str, server_url: str) -> bool:
    """Follow an existing job to completion."""
    from cli.progress_monitor import ProgressMonitor

    monitor = ProgressMonitor(server_url=server_url)
    return await monitor.follow(job_id) is not None


def show_config():
    from core.feature_flags import get_backend_status

    status = get_backend_status()
    print(json.dumps(status, indent=2))
    return not status["issues"]


def main():
    from core.config import get_config

    config = get_config()
    default_server = f"http://{config.host}:{config.port}"

    parser = argparse.ArgumentParser(
        description="PromptReel - Text-to-Video Generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Start server
    python main.py server --port 8000

    # Generate a video
    python main.py generate "A cat surfing a wave at sunset"

    # Follow a job
    python main.py status dalle_1730000000000_abc123xyz
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Server command
    server_parser = subparsers.add_parser("server", help="Start HTTP server")
    server_parser.add_argument("--host", default=config.host, help="Host to bind")
    server_parser.add_argument("--port", type=int, default=config.port, help="Port to bind")
    server_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a video")
    gen_parser.add_argument("prompt", help="Text prompt (max 240 characters)")
    gen_parser.add_argument("--server", default=default_server, help="Server URL")

    # Status command
    status_parser = subparsers.add_parser("status", help="Follow an existing job")
    status_parser.add_argument("job_id", help="Job ID to follow")
    status_parser.add_argument("--server", default=default_server, help="Server URL")

    # Config command
    subparsers.add_parser("config", help="Show backend selection and configuration issues")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Run appropriate command
    if args.command == "server":
        start_server(host=args.host, port=args.port, reload=args.reload)

    elif args.command == "generate":
        ok = asyncio.run(generate(args.prompt, args.server))
        sys.exit(0 if ok else 1)

    elif args.command == "status":
        ok = asyncio.run(follow(args.job_id, args.server))
        sys.exit(0 if ok else 1)

    elif args.command == "config":
        sys.exit(0 if show_config() else 1)


if __name__ == "__main__":
    main()

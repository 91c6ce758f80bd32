#!/usr/bin/env python3
"""
CLI Progress Monitor for Generation Jobs

Polls the PromptReel server and displays job status as it changes.

Usage:
    python -m cli.progress_monitor mock_1730000000000_abc123xyz
    python -m cli.progress_monitor --server http://localhost:8000 dalle_1730000000000_abc123xyz
"""

import argparse
import asyncio
import time
from typing import Optional

from core.config import get_config
from services.generation.errors import AbortedError, GenerationError
from services.generation.models import MediaType
from services.polling import GenerationOutcome, GenerationSession, PollOptions


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Clear line
    CLEAR_LINE = "\033[2K\r"


def colored(text: str, color: str) -> str:
    """Apply color to text."""
    return f"{color}{text}{Colors.RESET}"


def format_duration(seconds: float) -> str:
    """Format duration as MM:SS."""
    if seconds < 0:
        return "--:--"

    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


STATUS_DISPLAY = {
    "queued": ("⏳", Colors.DIM, "Dreaming..."),
    "processing": ("🎬", Colors.CYAN, "Rendering tiny masterpiece..."),
    "succeeded": ("✅", Colors.GREEN, "Done"),
    "failed": ("❌", Colors.RED, "Failed"),
}


def format_status(status: str, elapsed: float) -> str:
    """Format a status line for display."""
    icon, color, message = STATUS_DISPLAY.get(status, ("•", Colors.WHITE, status))
    return (
        f"{Colors.CLEAR_LINE}"
        f"{icon} {colored(status.upper(), color)} "
        f"{colored(message, Colors.WHITE)} "
        f"{colored(format_duration(elapsed), Colors.DIM)}"
    )


class ProgressMonitor:
    """CLI progress monitor for generation jobs."""

    def __init__(
        self,
        server_url: str = "http://localhost:8000",
        options: Optional[PollOptions] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.options = options or PollOptions.from_config(get_config())

        self._started_at = time.monotonic()
        self._last_status: Optional[str] = None

    def _on_progress(self, status: str):
        """Render a status update; repeated statuses only refresh the timer."""
        elapsed = time.monotonic() - self._started_at
        if status != self._last_status and self._last_status is not None:
            print()
        self._last_status = status
        print(format_status(status, elapsed), end="", flush=True)

    def _header(self, label: str, value: str):
        print(colored("\n╔═══════════════════════════════════════════╗", Colors.CYAN))
        print(colored("║  PromptReel Progress Monitor              ║", Colors.CYAN))
        print(colored("╚═══════════════════════════════════════════╝", Colors.CYAN))
        print(f"{label}: {colored(value, Colors.BOLD)}")
        print(f"Server: {colored(self.server_url, Colors.DIM)}")
        print(colored("─" * 45, Colors.DIM))

    def _report(self, outcome: GenerationOutcome):
        print()
        kind = "Image" if outcome.media_type == MediaType.IMAGE else "Video"
        print(f"🎬 {kind} ready: {colored(outcome.media_url, Colors.CYAN)}")
        if outcome.media_type == MediaType.IMAGE:
            print(colored("    (video generation unavailable, fell back to an image)", Colors.DIM))

    async def _watch(self, coro_factory) -> Optional[GenerationOutcome]:
        self._started_at = time.monotonic()
        self._last_status = None

        async with GenerationSession(
            self.server_url, options=self.options, on_progress=self._on_progress
        ) as session:
            try:
                outcome = await coro_factory(session)
            except AbortedError:
                return None
            except GenerationError as e:
                print()
                print(colored(f"❌ {e}", Colors.RED))
                return None

        self._report(outcome)
        return outcome

    async def generate(self, prompt: str) -> Optional[GenerationOutcome]:
        """Submit a prompt and follow the job to completion."""
        self._header("Prompt", prompt[:60])
        return await self._watch(lambda session: session.submit(prompt))

    async def follow(self, job_id: str) -> Optional[GenerationOutcome]:
        """Follow an existing job to completion."""
        self._header("Job", job_id)
        return await self._watch(lambda session: session.resume(job_id))


async def main():
    parser = argparse.ArgumentParser(
        description="Monitor generation job progress",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s mock_1730000000000_abc123xyz
    %(prog)s --server http://remote:8000 dalle_1730000000000_abc123xyz
        """,
    )
    parser.add_argument(
        "job_id",
        help="Job ID to monitor",
    )
    parser.add_argument(
        "--server",
        default="http://localhost:8000",
        help="Server URL (default: http://localhost:8000)",
    )

    args = parser.parse_args()

    monitor = ProgressMonitor(server_url=args.server)

    try:
        await monitor.follow(args.job_id)
    except KeyboardInterrupt:
        print(colored("\n\nInterrupted by user.", Colors.YELLOW))


if __name__ == "__main__":
    asyncio.run(main())

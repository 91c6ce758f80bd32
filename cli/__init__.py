"""
PromptReel CLI Tools

Command-line tools for interacting with the generation service.

Tools:
- progress_monitor: Submit prompts and follow job status
"""

from .progress_monitor import ProgressMonitor

__all__ = ["ProgressMonitor"]

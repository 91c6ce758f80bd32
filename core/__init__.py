"""
PromptReel Core Components

Provides foundational infrastructure for the generation service:
- Environment-driven configuration
- Backend selection flags
- Keyed in-process cache
"""

from .cache import TimedCache
from .config import Config, get_config
from .feature_flags import BackendMode, get_backend_mode

__all__ = ["TimedCache", "Config", "get_config", "BackendMode", "get_backend_mode"]

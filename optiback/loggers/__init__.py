from .base import MetricsLogger
from .info import InfoLogger
from .last_entry import LastEntryLogger
from .memory import MemoryLogger
from .silent import SilentLogger

__all__ = ['MetricsLogger', 'InfoLogger', 'LastEntryLogger', 'MemoryLogger', 'SilentLogger']

from .loader import load_settings
from .schema import GradingConfig, LoggingConfig, ParserConfig, ScoringConfig, Settings

__all__ = [
    "GradingConfig",
    "LoggingConfig",
    "ParserConfig",
    "ScoringConfig",
    "Settings",
    "load_settings",
]

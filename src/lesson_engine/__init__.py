"""
Interactive lesson engine.

Turns generated lesson text into typed interactive segments and grades
adventures and quizzes built from them. The package performs no I/O of its
own beyond optional config loading; content generation, storage and
rendering belong to the host application.
"""

from .config.loader import load_settings
from .parsing import ContentParser, parse

__all__ = ["ContentParser", "load_settings", "parse"]

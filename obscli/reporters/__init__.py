"""Reporter modules for outputting command results."""

from .base import Reporter
from .console import ConsoleReporter
from .json_reporter import JsonReporter

__all__ = ["Reporter", "ConsoleReporter", "JsonReporter"]

"""Reporter modules for progress and command results."""

from .base import Reporter
from .buffered import BufferedReporter, ReporterError
from .console import ConsoleReporter
from .json_reporter import JsonReporter

__all__ = ["Reporter", "BufferedReporter", "ConsoleReporter", "JsonReporter", "ReporterError"]

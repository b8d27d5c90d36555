"""
Schema Logger

Progress output for schema discovery runs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rich.console import Console


class LogLevel(Enum):
    """Log level for entries."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
}


@dataclass
class LogEntry:
    """A single emitted message."""

    timestamp: str
    level: LogLevel
    message: str


@dataclass
class GenerationSummary:
    """Summary of a discovery run."""

    started_at: datetime
    completed_at: datetime | None = None

    models_found: int = 0
    entities_generated: int = 0
    models_failed: list[str] = field(default_factory=list)
    structural: bool = True

    @property
    def duration(self) -> str:
        if not self.completed_at:
            return "In progress"
        delta = self.completed_at - self.started_at
        return f"{delta.total_seconds():.2f}s"

    def to_text(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            "SCHEMA GENERATION SUMMARY",
            "=" * 60,
            f"{'Started:':<20} {self.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
            f"{'Duration:':<20} {self.duration}",
            f"{'Database columns:':<20} {'yes' if self.structural else 'no (code only)'}",
            f"{'Models found:':<20} {self.models_found}",
            f"{'Entities:':<20} {self.entities_generated}",
            f"{'Failed:':<20} {len(self.models_failed)}",
        ]
        for name in self.models_failed:
            lines.append(f"  • {name}")
        lines.append("=" * 60)
        return "\n".join(lines)


class SchemaLogger:
    """
    Console progress sink for schema discovery.

    Messages below the minimum level are dropped; the rest are printed with
    Rich (unless console output is off) and kept in ``entries``.

    Example:
        >>> logger = SchemaLogger(level="DEBUG")
        >>> logger.info("Model : app.models.Post")
    """

    COLORS = {
        LogLevel.DEBUG: "dim",
        LogLevel.INFO: "blue",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red bold",
    }

    def __init__(
        self,
        console_output: bool = True,
        level: str | LogLevel = LogLevel.INFO,
        console: Console | None = None,
    ):
        """
        Initialize logger.

        Args:
            console_output: Whether to print to console
            level: Minimum level kept
            console: Rich console to print to
        """
        self.console_output = console_output
        self.level = level if isinstance(level, LogLevel) else LogLevel(level.upper())
        self._console = console or Console()
        self.entries: list[LogEntry] = []

    def debug(self, message: str) -> None:
        self._log_message(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self._log_message(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self._log_message(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._log_message(LogLevel.ERROR, message)

    def messages(self, level: LogLevel | None = None) -> list[str]:
        """Get the kept messages, optionally for one level."""
        return [e.message for e in self.entries if level is None or e.level == level]

    def print_summary(self, summary: GenerationSummary) -> None:
        if self.console_output:
            self._console.print(summary.to_text(), markup=False)

    def _log_message(self, level: LogLevel, message: str) -> None:
        if LEVEL_ORDER[level] < LEVEL_ORDER[self.level]:
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        self.entries.append(LogEntry(timestamp=timestamp, level=level, message=message))

        if not self.console_output:
            return

        color = self.COLORS.get(level, "white")
        self._console.print(f"[dim]{timestamp}[/] [{color}]{level.value}[/] ", end="")
        self._console.print(message, markup=False, highlight=False)

"""Exception hierarchy shared across memwatch."""


class MemwatchError(Exception):
    """Base class for all memwatch errors."""


class SpawnError(MemwatchError):
    """The command to monitor could not be started."""

    def __init__(self, command, reason: str, exit_status: int = 127):
        self.command = list(command)
        self.reason = reason
        self.exit_status = exit_status
        super().__init__(f"Failed to start {' '.join(self.command)!r}: {reason}")


class OutputSinkError(MemwatchError):
    """The report destination could not be opened or written."""


class SnapshotError(MemwatchError):
    """The process table could not be read."""


class ConfigError(MemwatchError):
    """Invalid configuration file or option values."""

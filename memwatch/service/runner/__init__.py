from .command_runner import CommandRunner

__all__ = ["CommandRunner"]

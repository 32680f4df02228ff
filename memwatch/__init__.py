"""Watch the memory of a command's whole process tree and report new high water marks."""

__version__ = "0.3.0"

KIB = 1024
MIB = 1024 * 1024


def kib_to_bytes(value: int) -> int:
    return value * KIB


def bytes_to_mib(value: int) -> int:
    """Whole MiB, truncated like free(1) -m."""
    return value // MIB

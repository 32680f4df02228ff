from pathlib import Path


def executable_name(exe: str, fallback: str) -> str:
    """
    Return the file name of an executable path.

    Falls back to `fallback` (usually the kernel-reported process name) when
    the path is empty or has no file name component, e.g. kernel threads or
    processes whose exe link is not readable.
    """
    if exe:
        name = Path(exe).name
        if name:
            return name
    return fallback

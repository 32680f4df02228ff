import subprocess
import threading
from pathlib import Path
from typing import List, Optional

from memwatch.errors import SpawnError
from memwatch.util.log_config import setup_logger

logger = setup_logger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


def exit_status(returncode: int) -> int:
    """Shell-style exit status: a child killed by signal N yields 128 + N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class CommandRunner:
    """Spawn the command to monitor and signal when it exits.

    `exited` is the only state shared with the sampling thread. It is set
    exactly once, by the waiter thread, after the child has been reaped.
    """

    def __init__(self, command: List[str], cwd: Optional[Path] = None) -> None:
        self.command = list(command)
        self.cwd = cwd
        self.exited = threading.Event()
        self.process: Optional[subprocess.Popen] = None
        self._waiter: Optional[threading.Thread] = None

    def run_subprocess(self) -> subprocess.Popen:
        """
        Start the subprocess and return the Popen instance promptly.

        A background thread waits for the subprocess to finish and then calls
        `after_run()`, which raises the cancellation signal.

        Raises:
            SpawnError: if the command cannot be started
        """
        if not self.command:
            raise SpawnError(self.command, "no command given")

        # The command runs exactly as given: bare names go through the PATH
        # lookup, paths are not resolved so symlinks keep their argv[0].
        try:
            process = subprocess.Popen(self.command, cwd=self.cwd)
        except FileNotFoundError as e:
            raise SpawnError(self.command, str(e), EXIT_NOT_FOUND) from e
        except (PermissionError, OSError) as e:
            raise SpawnError(self.command, str(e), EXIT_NOT_EXECUTABLE) from e

        self.process = process
        logger.info(f"Started: {' '.join(self.command)} (pid {process.pid})")

        def _wait_and_finalize(p: subprocess.Popen) -> None:
            p.wait()
            self.after_run()

        self._waiter = threading.Thread(target=_wait_and_finalize, args=(process,), name="memwatch-supervisor", daemon=True)
        self._waiter.start()

        return process

    def after_run(self) -> None:
        logger.debug(f"Process {self.process.pid} exited with return code {self.process.returncode}")
        self.exited.set()

    def wait(self) -> int:
        """Block until the command exits and return its shell-style exit status."""
        if self.process is None:
            raise RuntimeError("run_subprocess() has not been called")
        self.exited.wait()
        return exit_status(self.process.returncode)

    def terminate(self) -> None:
        """Kill the command if it is still running."""
        if self.process is None or self.process.poll() is not None:
            return
        logger.warning(f"Killing process {self.process.pid}")
        self.process.kill()
        self.process.wait()

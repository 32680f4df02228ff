#!/usr/bin/env python3
"""
Run a command and watch the memory of its process tree.

The command is spawned, a sampling thread reports its memory until it exits,
and memwatch exits with the command's own exit status.
"""
import logging
import sys
from typing import List, Optional

from memwatch.cli.cli import config_overrides, parse_monitor_args
from memwatch.config.config_loader import ConfigLoader
from memwatch.errors import ConfigError, SpawnError
from memwatch.service.monitor.memory_monitor import MemoryMonitor
from memwatch.service.runner.command_runner import CommandRunner
from memwatch.util.log_config import set_log_level, setup_logger
from memwatch.util.units import bytes_to_mib

EXIT_CONFIG_ERROR = 2

logger = setup_logger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_monitor_args(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)

    try:
        config = ConfigLoader(args.config, env=args.env).build(config_overrides(args))
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")
    logger.debug(str(config))

    runner = CommandRunner(args.command)
    try:
        process = runner.run_subprocess()
    except SpawnError as e:
        logger.error(str(e))
        return e.exit_status

    monitor = MemoryMonitor(process.pid, config, runner.exited)
    monitor.start()

    try:
        status = runner.wait()
        error = monitor.join()
    except BaseException:
        runner.terminate()
        raise

    if error is not None:
        logger.error(f"Memory monitoring stopped early: {error}")

    logger.info(f"Process finished with exit status {status}, "
                f"high water mark {bytes_to_mib(monitor.high_water_mark)} MiB")
    return status


if __name__ == "__main__":
    sys.exit(main())

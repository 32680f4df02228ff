from enum import Enum


class SamplerState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"

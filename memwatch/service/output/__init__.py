from .output_sink import OutputSink

__all__ = ["OutputSink"]

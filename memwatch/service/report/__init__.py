from .reporter import ReportRenderer

__all__ = ["ReportRenderer"]

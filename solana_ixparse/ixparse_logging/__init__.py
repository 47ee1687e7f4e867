"""
Structured logging for solana_ixparse.

JSON logs with timestamp, level, event_type and logger name.
Use get_logger() in every module for aggregation-friendly output.
"""

from solana_ixparse.ixparse_logging.logger import bind_program, get_logger

__all__ = ["bind_program", "get_logger"]

"""Logging and metrics helpers."""

from .logger import create_session_log_file, setup_logger

__all__ = ['setup_logger', 'create_session_log_file']

"""
Utilities Module for the MEXC Stream Client
==========================================

Configuration management and logging setup.
"""

from .config import config, Config, StreamSettings
from .logger import get_logger, log_config, LogLevel

__all__ = ['config', 'Config', 'StreamSettings', 'get_logger', 'log_config', 'LogLevel']

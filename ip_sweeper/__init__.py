"""
Сканер диапазонов IPv4 по ICMP echo
"""

__version__ = "1.0.0"
__author__ = "Network Automation Team"

from .config import SweeperConfig, ConfigLoader, SweepResult
from .errors import (
    SweepError,
    InvalidRangeError,
    ProbeTransportError,
    WatchdogTimeoutError,
    OutputSinkError
)
from .range_parser import RangeDescriptor, WorkSupply, expand
from .sweeper import RangeSweeper

__all__ = [
    'SweeperConfig',
    'ConfigLoader',
    'SweepResult',
    'SweepError',
    'InvalidRangeError',
    'ProbeTransportError',
    'WatchdogTimeoutError',
    'OutputSinkError',
    'RangeDescriptor',
    'WorkSupply',
    'expand',
    'RangeSweeper'
]

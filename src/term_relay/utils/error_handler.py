"""
Error Handling for Term Relay

Defines the relay's exception types and an error handler that classifies,
logs, and keeps statistics about the failures the relay survives.
"""

import logging
import re
import signal
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import discord

from .logging_setup import get_logger

logger = get_logger('error_handler')


class RelayError(Exception):
    """Base class for relay errors"""


class ProcessExitError(RelayError):
    """The relayed command terminated unsuccessfully"""

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(self._describe(returncode))

    @staticmethod
    def _describe(returncode: int) -> str:
        if returncode < 0:
            try:
                name = signal.Signals(-returncode).name
            except ValueError:
                name = str(-returncode)
            return f"signal: {name}"
        return f"exit status {returncode}"


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"           # Expected noise, e.g. an edit that was superseded
    MEDIUM = "medium"     # Degraded behaviour, the relay continues
    HIGH = "high"         # User visible failure
    CRITICAL = "critical" # Startup cannot continue


_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.DEBUG,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ErrorCategory(Enum):
    """Categories of errors"""
    TRANSPORT = "transport"     # Send/edit/delete against the messaging platform
    PROCESS = "process"         # Spawning or running the external command
    STREAM = "stream"           # Reading the command's output
    CONFIGURATION = "config"    # Configuration problems
    INTERNAL = "internal"       # Anything else


@dataclass
class ErrorInfo:
    """Information about an error"""
    error: BaseException
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    context: Dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict:
        """Convert to dictionary for logging"""
        return {
            'error_type': type(self.error).__name__,
            'category': self.category.value,
            'severity': self.severity.value,
            'message': self.message,
            'context': self.context,
            'timestamp': self.timestamp,
            'traceback': ''.join(traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            )) if self.error.__traceback__ else None
        }


class ErrorDetector:
    """Classifies errors by type and message"""

    PATTERNS = {
        ErrorCategory.TRANSPORT: [
            r'rate limited',
            r'message.*too long',
            r'unknown message',
            r'missing permissions',
        ],
        ErrorCategory.PROCESS: [
            r'no such file or directory',
            r'exit status \d+',
            r'signal: \w+',
            r'permission denied',
        ],
    }

    @classmethod
    def classify_error(cls, error: BaseException, context: Optional[Dict] = None,
                       category: Optional[ErrorCategory] = None) -> ErrorInfo:
        """Classify an error and determine its properties"""
        error_message = str(error) or type(error).__name__

        if category is None:
            category = ErrorCategory.INTERNAL
            if isinstance(error, discord.DiscordException):
                category = ErrorCategory.TRANSPORT
            elif isinstance(error, (ProcessExitError, OSError)):
                category = ErrorCategory.PROCESS
            else:
                for cat, patterns in cls.PATTERNS.items():
                    if any(re.search(pattern, error_message, re.IGNORECASE) for pattern in patterns):
                        category = cat
                        break

        return ErrorInfo(
            error=error,
            category=category,
            severity=cls._determine_severity(category, context or {}),
            message=error_message,
            context=context or {}
        )

    @staticmethod
    def _determine_severity(category: ErrorCategory, context: Dict) -> ErrorSeverity:
        if context.get('severity'):
            return ErrorSeverity(context['severity'])
        if category == ErrorCategory.CONFIGURATION:
            return ErrorSeverity.CRITICAL
        if category == ErrorCategory.INTERNAL:
            return ErrorSeverity.HIGH
        return ErrorSeverity.MEDIUM


class ErrorHandler:
    """Records, logs and counts errors"""

    MAX_HISTORY = 1000

    def __init__(self):
        self.detector = ErrorDetector()
        self.error_history: List[ErrorInfo] = []
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict:
        return {
            'total_errors': 0,
            'errors_by_category': {cat.value: 0 for cat in ErrorCategory},
            'errors_by_severity': {sev.value: 0 for sev in ErrorSeverity},
        }

    def handle_error(self, error: BaseException, context: Optional[Dict] = None,
                     category: Optional[ErrorCategory] = None) -> ErrorInfo:
        """Classify, log and record an error"""
        error_info = self.detector.classify_error(error, context, category)

        self._update_stats(error_info)

        self.error_history.append(error_info)
        if len(self.error_history) > self.MAX_HISTORY:
            self.error_history = self.error_history[-self.MAX_HISTORY:]

        summary = f"{error_info.category.value} error: {error_info.message}"
        if error_info.context:
            summary += f" {error_info.context}"
        log_level = _LOG_LEVELS[error_info.severity]
        logger.log(log_level, summary, extra={'error_info': error_info.to_dict()})

        return error_info

    def _update_stats(self, error_info: ErrorInfo):
        self.stats['total_errors'] += 1
        self.stats['errors_by_category'][error_info.category.value] += 1
        self.stats['errors_by_severity'][error_info.severity.value] += 1

    def get_recent_errors(self, count: int = 10) -> List[ErrorInfo]:
        """Get recent errors"""
        return self.error_history[-count:] if self.error_history else []

    def get_error_stats(self) -> Dict:
        """Get error statistics"""
        return {
            'total_errors': self.stats['total_errors'],
            'errors_by_category': dict(self.stats['errors_by_category']),
            'errors_by_severity': dict(self.stats['errors_by_severity']),
        }

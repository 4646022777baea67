"""
Centralized Logging Configuration
=================================

Provides a unified logging setup for the entire application with proper
log levels, colored console output and a rotating log file.
"""

import os
import sys
import logging
import warnings
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler
from datetime import datetime

from colorama import init, Fore, Style

init(autoreset=True)


class WerkzeugEndpointFilter(logging.Filter):
    """Filter to suppress high-frequency werkzeug request logs.

    Suppresses logging for static files, the favicon and state polling.
    """

    _suppressed_endpoints = (
        'GET /static/',
        'GET /favicon',
        'GET /api/gen/state ',
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for endpoint in self._suppressed_endpoints:
            if endpoint in message:
                return False
        return True


class ColoredSmartFormatter(logging.Formatter):
    """Formatter with color coding and shortened logger names."""

    def __init__(self, include_function: bool = False, use_colors: bool = True):
        self.include_function = include_function
        self.use_colors = use_colors
        super().__init__()

        self.level_colors = {
            logging.DEBUG: Fore.CYAN,
            logging.INFO: Fore.GREEN,
            logging.WARNING: Fore.YELLOW,
            logging.ERROR: Fore.RED,
            logging.CRITICAL: Fore.RED + Style.BRIGHT
        }

        self.service_colors = {
            'factory': Fore.BLUE,
            'api_client': Fore.MAGENTA,
            'generation': Fore.CYAN,
            'exporter': Fore.YELLOW,
            'route': Fore.GREEN,
        }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, '%H:%M:%S')
        level = record.levelname
        name = self._clean_logger_name(record.name)
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if self.use_colors:
            level_color = self.level_colors.get(record.levelno, "")
            service_color = self._get_service_color(name)
            colored_level = f"{level_color}{level:8}{Style.RESET_ALL}"
            colored_name = f"{service_color}{name:20}{Style.RESET_ALL}"
        else:
            colored_level = f"{level:8}"
            colored_name = f"{name:20}"

        # Function info for warnings and errors in development
        if self.include_function and record.levelno >= logging.WARNING:
            location = f"{record.funcName}:{record.lineno}"
            if self.use_colors:
                location = f"{Fore.WHITE}{Style.DIM}[{location}]{Style.RESET_ALL}"
            else:
                location = f"[{location}]"
            return f"[{timestamp}] {colored_level} {colored_name} {location} {message}"
        return f"[{timestamp}] {colored_level} {colored_name} {message}"

    def _clean_logger_name(self, name: str) -> str:
        """Clean and shorten logger names for readability."""
        replacements = {
            'Genify.': '',
            'genify.services.generation.': 'gen.',
            'genify.services.': 'svc.',
            'genify.routes.': 'route.',
            'genify.utils.': 'util.',
        }

        for old, new in replacements.items():
            if name.startswith(old):
                name = new + name[len(old):]
                break

        if len(name) > 20:
            name = name[:17] + "..."

        return name

    def _get_service_color(self, service_name: str) -> str:
        if not self.use_colors:
            return ""

        name_lower = service_name.lower()
        for service, color in self.service_colors.items():
            if service in name_lower:
                return color
        return Fore.WHITE


class LoggingConfig:
    """Centralized logging configuration for the application."""

    def __init__(self, app_name: str = "Genify", log_dir: Optional[Path] = None):
        self.app_name = app_name
        self.log_dir = log_dir or Path(__file__).resolve().parents[3] / "logs"
        self.log_level = self._get_log_level()
        self.is_development = os.environ.get('FLASK_ENV', 'development') == 'development'

        self._configure_warnings()

    def setup_logging(self, to_file: bool = True) -> logging.Logger:
        """Setup centralized logging configuration.

        Only handlers previously attached by this class are replaced, so
        pytest's capturing handler survives repeated setup.
        """
        root_logger = logging.getLogger()
        for h in list(root_logger.handlers):
            if getattr(h, "_genify", False):
                root_logger.removeHandler(h)
        root_logger.setLevel(self.log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(ColoredSmartFormatter(
            include_function=self.is_development,
            use_colors=True,
        ))
        console_handler._genify = True  # type: ignore[attr-defined]
        root_logger.addHandler(console_handler)

        if to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_dir / "app.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(ColoredSmartFormatter(include_function=True, use_colors=False))
            file_handler._genify = True  # type: ignore[attr-defined]
            root_logger.addHandler(file_handler)

        self._configure_specific_loggers()

        app_logger = logging.getLogger(self.app_name)
        app_logger.info(f"Logging configured - Level: {logging.getLevelName(self.log_level)}")
        return app_logger

    def _get_log_level(self) -> int:
        level_str = os.environ.get('LOG_LEVEL', 'INFO').upper()
        return getattr(logging, level_str, logging.INFO)

    def _configure_warnings(self):
        """Redirect Python warnings to logging."""
        warnings.filterwarnings('ignore', category=DeprecationWarning, module='aiohttp')
        logging.captureWarnings(True)
        logging.getLogger('py.warnings').setLevel(logging.ERROR)

    def _configure_specific_loggers(self):
        """Configure third-party loggers to reduce spam."""
        if not self.is_development:
            logging.getLogger('werkzeug').setLevel(logging.WARNING)
            logging.getLogger('flask.app').setLevel(logging.WARNING)

        logging.getLogger('urllib3.connectionpool').setLevel(logging.WARNING)
        logging.getLogger('aiohttp.access').setLevel(logging.WARNING)

        werkzeug_logger = logging.getLogger('werkzeug')
        if not any(isinstance(f, WerkzeugEndpointFilter) for f in werkzeug_logger.filters):
            werkzeug_logger.addFilter(WerkzeugEndpointFilter())

    def cleanup_old_logs(self, days_to_keep: int = 7):
        """Remove log files older than ``days_to_keep`` days."""
        if not self.log_dir.exists():
            return

        cutoff_time = datetime.now().timestamp() - (days_to_keep * 24 * 3600)
        for log_file in self.log_dir.glob("*.log*"):
            try:
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
            except OSError as e:
                logging.getLogger(self.app_name).debug(f"Could not remove {log_file}: {e}")


_logging_config = None


def get_logging_config() -> LoggingConfig:
    """Get the global logging configuration instance."""
    global _logging_config
    if _logging_config is None:
        _logging_config = LoggingConfig()
    return _logging_config


def setup_application_logging(to_file: bool = True) -> logging.Logger:
    """Setup application logging - call this once at startup."""
    return get_logging_config().setup_logging(to_file=to_file)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(f"Genify.{name}")

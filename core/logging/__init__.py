# Structured logging with channel support
import sys
import logging
import structlog
from typing import Optional, Dict, Any, Iterable

from core.config.settings import Settings
from core.logging.channels import LogChannel, get_channel_for_component
from core.logging.correlation import CorrelationIdManager

# Global flag to prevent duplicate logging configuration
_logging_configured = False


def add_correlation_id(logger, name, event_dict):
    """Add correlation ID and context to log events if available"""
    correlation_id = CorrelationIdManager.get_correlation_id()
    if correlation_id:
        event_dict['correlation_id'] = correlation_id
        correlation_context = CorrelationIdManager.get_correlation_context()
        if correlation_context:
            event_dict['correlation_context'] = correlation_context
    return event_dict


def make_redactor(keys: Iterable[str]):
    """Build a processor that scrubs sensitive keys recursively."""
    keys_to_redact = {k.lower() for k in keys}

    def _redact(obj):
        if isinstance(obj, dict):
            return {
                k: '[REDACTED]' if isinstance(k, str) and k.lower() in keys_to_redact else _redact(v)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [_redact(v) for v in obj]
        return obj

    def redact_sensitive(logger, name, event_dict):
        return _redact(event_dict)

    return redact_sensitive


def make_standard_context(settings: Settings):
    """Bind standard context fields once from settings."""
    env = settings.environment.value
    app_name = settings.app_name
    version = settings.version

    def add_standard_context(logger, name, event_dict):
        event_dict.setdefault('env', env)
        event_dict.setdefault('service', app_name)
        event_dict.setdefault('version', version)
        return event_dict

    return add_standard_context


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog for the gateway."""
    global _logging_configured

    # Prevent duplicate configuration
    if _logging_configured:
        return

    log_settings = settings.logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_settings.level.upper(),
    )
    logging.getLogger(LogChannel.API.value).setLevel(log_settings.api_level.upper())
    logging.getLogger(LogChannel.TRADING.value).setLevel(log_settings.trading_level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if log_settings.json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            add_correlation_id,
            make_standard_context(settings),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            make_redactor(log_settings.redact_keys),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _logging_configured = True


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance, bound to its component channel."""
    if not component:
        return structlog.get_logger(name)
    return get_channel_logger(name, get_channel_for_component(component), component=component)


def get_channel_logger(name: str, channel: LogChannel, **initial_values: Any) -> structlog.BoundLogger:
    """Get a logger for a specific channel.

    Context is passed as initial values so the proxy stays lazy and module-level
    loggers pick up the configuration applied later by configure_logging.
    """
    # Nested under the channel's stdlib logger so channel levels apply
    return structlog.get_logger(f"{channel.value}.{name}", channel=channel.value, **initial_values)


def get_api_logger_safe(name: str) -> structlog.BoundLogger:
    """Get an API logger."""
    return get_channel_logger(name, LogChannel.API)


def get_trading_logger_safe(name: str) -> structlog.BoundLogger:
    """Get a trading logger."""
    return get_channel_logger(name, LogChannel.TRADING)


def bind_request_context(logger: structlog.BoundLogger, operation: str,
                         user_id: Optional[str] = None) -> structlog.BoundLogger:
    """Bind operation and caller context consistently to a logger."""
    ctx: Dict[str, Any] = {"operation": operation}
    if user_id:
        ctx["user_id"] = user_id
    return logger.bind(**ctx)


__all__ = [
    "LogChannel",
    "configure_logging",
    "get_logger",
    "get_channel_logger",
    "get_api_logger_safe",
    "get_trading_logger_safe",
    "bind_request_context",
]

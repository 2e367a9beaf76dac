"""
Correlation ID handling for request tracing across the gateway.
Every log event emitted while serving a request carries the same correlation ID.
"""

import uuid
import contextvars
from typing import Optional, Dict, Any
from datetime import datetime, timezone

# Context variable to store correlation ID for the current request
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)

# Context variable to store additional correlation context
_correlation_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'correlation_context', default={}
)


class CorrelationIdManager:
    """Manager for correlation ID lifecycle and context propagation"""

    @staticmethod
    def generate_correlation_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def set_correlation_id(correlation_id: str) -> str:
        _correlation_id.set(correlation_id)
        return correlation_id

    @staticmethod
    def get_correlation_id() -> Optional[str]:
        return _correlation_id.get()

    @staticmethod
    def ensure_correlation_id() -> str:
        """
        Ensure a correlation ID exists, generating one if needed.

        Returns:
            Current or newly generated correlation ID
        """
        current_id = _correlation_id.get()
        if current_id is None:
            current_id = CorrelationIdManager.generate_correlation_id()
            _correlation_id.set(current_id)
        return current_id

    @staticmethod
    def set_correlation_context(**kwargs) -> Dict[str, Any]:
        """
        Merge key-value pairs into the current correlation context.

        Returns:
            Updated correlation context
        """
        current_context = _correlation_context.get().copy()
        current_context.update(kwargs)
        _correlation_context.set(current_context)
        return current_context

    @staticmethod
    def get_correlation_context() -> Dict[str, Any]:
        return _correlation_context.get().copy()

    @staticmethod
    def clear_correlation() -> None:
        """Clear correlation ID and context from current context"""
        _correlation_id.set(None)
        _correlation_context.set({})


def create_correlation_context(
    service: str,
    operation: str,
    user_id: Optional[str] = None,
    **additional_context
) -> str:
    """
    Create a new correlation context for an operation.

    Args:
        service: Name of the service
        operation: Name of the operation
        user_id: Optional caller identifier
        **additional_context: Additional context key-value pairs

    Returns:
        Correlation ID for the created context
    """
    correlation_id = CorrelationIdManager.ensure_correlation_id()

    context = {
        "service": service,
        "operation": operation,
        "started_at": datetime.now(timezone.utc).isoformat()
    }
    if user_id:
        context["user_id"] = user_id

    context.update(additional_context)
    CorrelationIdManager.set_correlation_context(**context)

    return correlation_id

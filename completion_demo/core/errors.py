"""
Error types raised while collecting results from a computation batch
"""

from typing import Optional, Dict, Any
from datetime import datetime


class CompletionDemoError(Exception):
    """Base exception for all errors raised by the demonstrator"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": repr(self.cause) if self.cause else None,
        }


class ComputationFailure(CompletionDemoError):
    """A single computation of a batch raised instead of producing a result"""

    def __init__(self, order: int, cause: BaseException,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Computation {order} failed: {cause!r}", context, cause)
        self.order = order

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["order"] = self.order
        return data

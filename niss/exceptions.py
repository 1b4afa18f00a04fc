"""
NISS Custom Exceptions
======================

Centralized exception hierarchy for the scoring engine.
All exceptions inherit from NISSError for easy catching at boundaries.

Usage:
    from niss.exceptions import ValidationError, ComponentError

    try:
        engine.validate(stock)
    except ValidationError as e:
        # Surface as an ERROR result instead of crashing the screen
        logger.warning(f"Rejected snapshot: {e}")
"""

from typing import Optional, Any, Dict


class NISSError(Exception):
    """Base exception for all NISS errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


# =============================================================================
# Input Validation Errors
# =============================================================================

class ValidationError(NISSError):
    """Input snapshot failed validation checks."""

    def __init__(
        self,
        field: str,
        reason: str,
        value: Optional[Any] = None
    ):
        self.field = field
        self.reason = reason
        self.value = value

        msg = f"Invalid stock data: {reason}"
        super().__init__(msg, {
            "field": field,
            "value": str(value)[:100] if value is not None else None
        })


# =============================================================================
# Scoring Errors
# =============================================================================

class ComponentError(NISSError):
    """Fault inside a single component scorer."""

    def __init__(self, symbol: Optional[str], component: str, reason: str):
        self.symbol = symbol
        self.component = component

        msg = f"Component {component} failed"
        if symbol:
            msg += f" for {symbol}"
        msg += f": {reason}"
        super().__init__(msg, {
            "symbol": symbol,
            "component": component
        })


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(NISSError):
    """Invalid engine configuration."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        msg = f"Configuration error for {setting}: {reason}"
        super().__init__(msg, {"setting": setting})


def is_data_error(exc: Exception) -> bool:
    """Check if an exception stems from bad upstream data (score as ERROR, keep going)."""
    return isinstance(exc, (ValidationError, ComponentError))

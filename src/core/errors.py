# src/core/errors.py
"""
Typed errors + utilities for the matching engine.

Exports
-------
- EngineError, InputValidationError, StoreError, StoreUnavailable,
  DecisionLogError
- ENGINE_ERRORS
- classify_store_error(exc)
- store_error_guard()

Exhausted / no-match outcomes are selection states, not errors.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import requests

# =========================
# Exception types
# =========================


class EngineError(RuntimeError):
    """Base class for matching-engine failures."""

    retryable: bool = False


class InputValidationError(EngineError, ValueError):
    """Malformed criteria or listing (e.g. non-positive price). Never partially scored."""


class StoreError(EngineError):
    """Listing store returned something the engine cannot use."""


class StoreUnavailable(StoreError):
    """Listing store query failed; the caller may retry. Session state is untouched."""

    retryable = True


class DecisionLogError(EngineError):
    """Decision log write failed. Logged and swallowed by record_decision()."""

    retryable = True


# Selector tuple for grouped exception handling
ENGINE_ERRORS = (
    InputValidationError,
    StoreError,
    StoreUnavailable,
    DecisionLogError,
)

# =========================
# Classification helpers
# =========================


def classify_store_error(exc: Exception) -> EngineError:
    """
    Map arbitrary exceptions raised by a store adapter to a typed error.

    Heuristics:
      - Any EngineError subclass → passed through
      - requests.* transport/HTTP errors → StoreUnavailable
      - OSError (file-backed stores) → StoreUnavailable
      - ValueError/KeyError/TypeError (bad payload shape) → StoreError
      - Fallback → StoreUnavailable
    """
    if isinstance(exc, EngineError):
        return exc

    if isinstance(exc, requests.RequestException):
        return StoreUnavailable(f"{type(exc).__name__}: {exc}")

    if isinstance(exc, OSError):
        return StoreUnavailable(f"{type(exc).__name__}: {exc}")

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return StoreError(f"{type(exc).__name__}: {exc}")

    return StoreUnavailable(f"{type(exc).__name__}: {exc}")


@contextmanager
def store_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from store internals."""
    try:
        yield
    except ENGINE_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_store_error(exc) from exc


__all__ = [
    "EngineError",
    "InputValidationError",
    "StoreError",
    "StoreUnavailable",
    "DecisionLogError",
    "ENGINE_ERRORS",
    "classify_store_error",
    "store_error_guard",
]

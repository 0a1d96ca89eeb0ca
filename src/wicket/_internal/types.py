"""Shared type aliases used across wicket modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: called as handler(ctx, *params)
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (), (ctx) or (ctx, exc) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Batch job: called with no arguments
BatchJob: TypeAlias = Callable[[], Any]

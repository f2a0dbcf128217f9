"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def _operation_span(tracer: trace.Tracer, name: str, func: Callable[..., Any]) -> Iterator[Span]:
    """Open a span for one POS operation and record its outcome."""
    with tracer.start_as_current_span(name) as span:
        # "CartStore.add_item" -> component "CartStore"
        component, _, operation = func.__qualname__.rpartition(".")
        span.set_attribute("pos.operation", operation)
        if component:
            span.set_attribute("pos.component", component)

        try:
            yield span
        except Exception as e:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            raise
        else:
            span.set_attribute("success", True)


def traced(span_name: str | None = None, service_name: str = "pos-client") -> Callable[[F], F]:
    """Decorator to trace a POS operation with OpenTelemetry.

    Works on both coroutine functions and plain functions. Validation errors
    raised by the operation are recorded on the span and re-raised.

    Args:
        span_name: Name for the span (defaults to the function's qualified name)
        service_name: Instrumentation scope name

    Returns:
        Decorated function with tracing

    Example:
        @traced("payment_methods.toggle")
        async def toggle(self, method_id: str) -> PersistOutcome:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__qualname__
        tracer = trace.get_tracer(service_name)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _operation_span(tracer, name, func):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _operation_span(tracer, name, func):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore

    return decorator

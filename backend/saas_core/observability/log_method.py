"""Opt-in method logging.

Wrap a function or method explicitly to get entry/exit/timing debug logs and
an error log on failure:

    class EntityRepository:
        def __init__(self, session, tenant_id, logger):
            self.logger = logger

        @log_method("Create entity", include_args=True)
        def create(self, data):
            ...

Without an explicit logger the decorator uses ``self.logger`` of the bound
instance, and does nothing when neither is available.
"""

import functools
import inspect
import time
from typing import Any, Callable, Mapping, Optional, Sequence

from .logging_config import LogLevel, StructuredLogger

SENSITIVE_KEYS = frozenset({"password", "token", "secret"})


def _sanitize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: v for k, v in value.items() if k not in SENSITIVE_KEYS}
    return value


def sanitize_args(args: Sequence[Any]) -> list:
    return [_sanitize(arg) for arg in args]


def _resolve_logger(explicit: Optional[StructuredLogger], args: tuple) -> Optional[StructuredLogger]:
    if explicit is not None:
        logger = explicit
    elif args and isinstance(getattr(args[0], "logger", None), StructuredLogger):
        logger = args[0].logger
    else:
        return None
    return logger if logger.method_logging else None


def log_method(
    message: Optional[str] = None,
    include_args: bool = False,
    include_result: bool = False,
    include_execution_time: bool = True,
    logger: Optional[StructuredLogger] = None,
) -> Callable:
    """Decorator adding structured debug/error logs around a call.

    Args:
        message: Prefix for log messages (defaults to "Method called"/"Method completed"/"Method error")
        include_args: Log sanitized positional and keyword arguments on entry
        include_result: Log the sanitized return value on completion
        include_execution_time: Log the execution time on completion
        logger: Logger to use instead of ``self.logger``
    """

    def decorator(func: Callable) -> Callable:
        qualname = func.__qualname__
        params = list(inspect.signature(func).parameters)
        bound = bool(params) and params[0] in ("self", "cls")
        scope = qualname.split(".")
        class_name = scope[-2] if bound and len(scope) > 1 else None
        method_name = func.__name__
        label = f"{class_name}.{method_name}" if class_name else method_name

        def base_context() -> dict:
            return {"class_name": class_name, "method_name": method_name, "type": "method_execution"}

        def on_enter(active: StructuredLogger, args: tuple, kwargs: dict) -> None:
            if include_args and active.is_enabled_for(LogLevel.DEBUG):
                call_args = args[1:] if bound else args
                active.debug(
                    f"{message or 'Method called'}: {label}",
                    {**base_context(), "args": sanitize_args(call_args), "kwargs": _sanitize(kwargs)},
                )

        def on_success(active: StructuredLogger, result: Any, start_time: float) -> None:
            execution_time = round((time.perf_counter() - start_time) * 1000, 2)
            context = {**base_context(), "execution_time_ms": execution_time}
            if include_result:
                active.debug(
                    f"{message or 'Method completed'}: {label}",
                    {**context, "result": _sanitize(result)},
                )
            if include_execution_time:
                active.debug(f"Method execution time: {label} ({execution_time}ms)", context)

        def on_error(active: StructuredLogger, exc: BaseException, start_time: float) -> None:
            execution_time = round((time.perf_counter() - start_time) * 1000, 2)
            active.error(
                f"{message or 'Method error'}: {label}",
                exc,
                {**base_context(), "execution_time_ms": execution_time},
            )

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                active = _resolve_logger(logger, args)
                if active is None:
                    return await func(*args, **kwargs)
                on_enter(active, args, kwargs)
                start_time = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    on_error(active, exc, start_time)
                    raise
                on_success(active, result, start_time)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            active = _resolve_logger(logger, args)
            if active is None:
                return func(*args, **kwargs)
            on_enter(active, args, kwargs)
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                on_error(active, exc, start_time)
                raise
            on_success(active, result, start_time)
            return result

        return wrapper

    return decorator

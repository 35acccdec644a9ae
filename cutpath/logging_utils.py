from __future__ import annotations

import inspect
import logging
import reprlib
import time
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 8
_repr.maxtuple = 8
_repr.maxdict = 8

_MAX_KINDS = 6


def _summarize_array(value: np.ndarray, max_items: int) -> str:
    head = f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
    if value.size == 0:
        return head
    if value.size <= max_items:
        return f"{head}, values={_repr.repr(value.tolist())}"
    if value.dtype == bool:
        return f"{head}, true={int(np.count_nonzero(value))}"
    return f"{head}, min={float(value.min()):.6g}, max={float(value.max()):.6g}"


def _format_point(value: Any) -> Optional[str]:
    if (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in value)
    ):
        return f"({value[0]:.4g}, {value[1]:.4g})"
    return None


def _summarize_chain(value: Any) -> str:
    shapes = value.shapes
    kinds = ",".join(getattr(shape, "kind", type(shape).__name__.lower()) for shape in shapes[:_MAX_KINDS])
    if len(shapes) > _MAX_KINDS:
        kinds += ",..."
    direction = {True: "cw", False: "ccw"}.get(value.clockwise, "?")
    return f"Chain(id={value.id!r}, n={len(shapes)}, dir={direction}, [{kinds}])"


def _summarize_lead(value: Any) -> str:
    arc = value.geometry
    if arc is None:
        return f"Lead(type={value.type!r})"
    return (
        f"Lead(type={value.type!r}, r={arc.radius:.4g}, sweep={np.degrees(arc.sweep):.1f}deg, "
        f"at={_format_point(value.connection_point)})"
    )


def _summarize_domain(value: Any) -> Optional[str]:
    """One-line form of cutpath values; ``None`` for anything else."""

    name = type(value).__name__
    if name == "Chain" and isinstance(getattr(value, "shapes", None), tuple):
        return _summarize_chain(value)
    if name == "Part":
        return f"Part(id={value.id!r}, shell={value.shell.chain.id!r}, holes={len(value.holes)})"
    if name == "BoundingBox":
        return f"BoundingBox(({value.min_x:.4g}, {value.min_y:.4g})..({value.max_x:.4g}, {value.max_y:.4g}))"
    if name == "Lead":
        return _summarize_lead(value)
    if name == "LeadResult":
        ends = "+".join(label for label, lead in (("in", value.lead_in), ("out", value.lead_out)) if lead)
        return f"LeadResult(leads={ends or '-'}, warnings={len(value.warnings)})"
    if name == "PartDetectionResult":
        return f"PartDetectionResult(parts={len(value.parts)}, warnings={len(value.warnings)})"
    kind = getattr(value, "kind", None)
    shape_id = getattr(value, "id", None)
    if isinstance(kind, str) and isinstance(shape_id, str) and hasattr(value, "start_point"):
        start = _format_point(value.start_point())
        return f"{name}(id={shape_id!r}, start={start})"
    return None


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 300) -> str:
    if isinstance(value, np.ndarray):
        return _summarize_array(value, max_items)

    point = _format_point(value)
    if point is not None:
        return point

    summary = _summarize_domain(value)
    if summary is not None:
        return summary

    if isinstance(value, dict):
        items = []
        for idx, (key, val) in enumerate(value.items()):
            if idx >= max_items:
                items.append("...")
                break
            items.append(f"{_safe_repr(key)}: {_safe_repr(val)}")
        return "{" + ", ".join(items) + "}"

    if isinstance(value, (list, tuple)):
        open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        items = [_safe_repr(item) for item in value[:max_items]]
        if len(value) > max_items:
            items.append(f"... +{len(value) - max_items}")
        return f"{open_br}{', '.join(items)}{close_br}"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = []
    if args:
        parts.append("args=[" + ", ".join(_safe_repr(arg) for arg in args) + "]")
    if kwargs:
        parts.append("kwargs={" + ", ".join(f"{k}={_safe_repr(v)}" for k, v in kwargs.items()) + "}")
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(logger: logging.Logger, *, name: Optional[str] = None) -> Callable[[F], F]:
    """Return a decorator that logs a stage call at DEBUG level.

    Entry lists the arguments in compact form, exit adds the summarized
    result and the elapsed wall time. Failures are logged with traceback and
    re-raised.
    """

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        label = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s (%s)", label, _format_arguments(args, kwargs))
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", label)
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            logger.debug("Exiting %s -> %s [%.2f ms]", label, _safe_repr(result), elapsed_ms)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the module-level functions of a cutpath module with DEBUG call logs.

    Helpers listed in ``skip`` stay unwrapped; use it for tight inner loops
    such as per-candidate predicates.
    """

    module_name = namespace.get("__name__")
    if not isinstance(module_name, str):
        module_name = None
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set: Set[str] = set(skip or [])

    for name, value in list(namespace.items()):
        if name in skip_set:
            continue
        if inspect.isfunction(value) and getattr(value, "__module__", None) == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)

"""JSON audit trail for report generation, enabled with DEBUG_AUDIT=1."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


AUDIT_LOGGER_NAME = "dispatch.audit"
AUDIT_PREFIX = "AUDIT "


def audit_enabled() -> bool:
    return str(os.environ.get("DEBUG_AUDIT", "")).strip().lower() in {"1", "true", "yes", "on"}


def _jsonable(value):
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)


def emit_audit(event: str, *, logger: Optional[logging.Logger] = None, **fields) -> None:
    """Write one ``AUDIT {json}`` line; a no-op outside audit mode."""
    if not audit_enabled():
        return
    payload: Dict[str, object] = {str(k): _jsonable(v) for k, v in fields.items()}
    payload["event"] = str(event or "unknown")
    payload["ts"] = time.time()
    (logger or logging.getLogger(AUDIT_LOGGER_NAME)).info(
        "%s%s", AUDIT_PREFIX, json.dumps(payload, ensure_ascii=False, sort_keys=True)
    )


def parse_audit_line(line: str) -> Optional[Dict[str, object]]:
    if not line.startswith(AUDIT_PREFIX):
        return None
    return json.loads(line[len(AUDIT_PREFIX):])


@contextmanager
def audit_span(event: str, *, logger: Optional[logging.Logger] = None, **fields) -> Iterator[Dict[str, object]]:
    """Bracket a report stage with ``<event>:start`` / ``<event>:end``.

    Yields a dict the stage fills with its outcome (page count, bytes written,
    placeholders); those keys land on the end event next to status and
    elapsed_ms. Exceptions are recorded and re-raised.
    """
    outcome: Dict[str, object] = {}
    if not audit_enabled():
        yield outcome
        return

    emit_audit(f"{event}:start", logger=logger, **fields)
    t0 = time.perf_counter()
    status, error_text = "ok", ""
    try:
        yield outcome
    except Exception as exc:
        status, error_text = "error", f"{type(exc).__name__}: {exc}"
        raise
    finally:
        end_fields = dict(fields)
        end_fields.update(outcome)
        emit_audit(
            f"{event}:end",
            logger=logger,
            status=status,
            error=error_text,
            elapsed_ms=round((time.perf_counter() - t0) * 1000.0, 3),
            **end_fields,
        )

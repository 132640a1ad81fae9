from __future__ import annotations

import functools
import time
from dataclasses import dataclass
from typing import Any, Callable

from devassist_common.context import get_request_id, new_request_id, set_request_id
from devassist_common.telemetry import DEFAULT_TELEMETRY_FILE, log_event


# ---------------------------------------------------------------------------
# Shared helpers for MCP tool handlers
# ---------------------------------------------------------------------------


_REDACTION_KEYS = {"authorization", "auth", "token", "access_token", "api_key", "apikey", "secret"}


def sanitize_args_for_log(args: dict | None) -> dict:
    """Remove obvious secrets from args (telemetry layer also redacts)."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        out[str(k)] = "***redacted***" if str(k).lower() in _REDACTION_KEYS else v
    return out


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str
    client_id: str
    telemetry_file: str = DEFAULT_TELEMETRY_FILE

    # correlation id behavior
    new_corr_id_per_call: bool = True


def instrument_sync_tool(cfg: InstrumentConfig):
    """
    Decorator for a tool dispatch function taking one ``arguments`` mapping.

    Logs one telemetry record per call. Exceptions are recorded and re-raised;
    an exception's ``code`` attribute (if any) is logged as the error code.
    """

    def decorator(fn: Callable[[dict], Any]):

        @functools.wraps(fn)
        def wrapper(arguments: dict | None = None):
            corr_id = get_request_id()
            if cfg.new_corr_id_per_call or not corr_id:
                corr_id = new_request_id()
                set_request_id(corr_id)

            t0 = time.perf_counter()
            args_for_log: dict[str, Any] = {"args": sanitize_args_for_log(arguments)}

            try:
                return fn(arguments or {})
            except Exception as e:
                args_for_log["error"] = {"code": getattr(e, "code", "internal"), "message": str(e)}
                raise
            finally:
                ms = int((time.perf_counter() - t0) * 1000)
                log_event(
                    cfg.kind,
                    cfg.name,
                    args_for_log,
                    ok="error" not in args_for_log,
                    ms=ms,
                    client_id=cfg.client_id,
                    corr_id=corr_id,
                    telemetry_file=cfg.telemetry_file,
                )

        return wrapper

    return decorator

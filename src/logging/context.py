# src/logging/context.py - v1
"""Run context carried by every log record emitted during a discovery run.

One immutable ``RunContext`` lives in a context variable. Asyncio tasks
spawned inside a run inherit the context current at spawn time, so stage
changes made by the orchestrator before fanning out oracle calls show up
on the workers' records too.
"""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True)
class RunContext:
    plexus_id: str | None = None
    run_id: str | None = None
    mode: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, str]:
        """Fields that are set, for JSON log injection."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_EMPTY = RunContext()
_current: contextvars.ContextVar[RunContext] = contextvars.ContextVar(
    "plexweave_run_context", default=_EMPTY
)


def current_context() -> RunContext:
    return _current.get()


def enter_run(plexus_id: str, mode: str) -> contextvars.Token[RunContext]:
    """Start a fresh context for a run; pass the token to ``leave_run``."""
    return _current.set(RunContext(plexus_id=plexus_id, mode=mode))


def leave_run(token: contextvars.Token[RunContext]) -> None:
    _current.reset(token)


def bind_run_id(run_id: str) -> None:
    """Attach the run id once the run record exists."""
    _current.set(replace(_current.get(), run_id=run_id))


def set_stage(stage: str | None) -> None:
    _current.set(replace(_current.get(), stage=stage))

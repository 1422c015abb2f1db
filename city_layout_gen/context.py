"""
Per-run generation state.

One ``GenerationContext`` is created for every pipeline run and handed to the
stages that need it, so id counters and "already initialised" flags never
leak from one city into the next.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any

from .utils.seeds import derive_seed

log = logging.getLogger(__name__)


class StageOrderError(RuntimeError):
    """A stage was started before a stage it reads from."""


@dataclass(slots=True)
class Issue:
    stage: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"stage": self.stage, "message": self.message, "details": dict(self.details)}


@dataclass
class GenerationContext:
    seed: int = 0
    issues: list[Issue] = field(default_factory=list)
    _next_id: int = field(default=0, init=False, repr=False)
    _flags: set[str] = field(default_factory=set, init=False, repr=False)

    def next_id(self) -> int:
        """Hand out the next district id; ids are never reused within a run."""
        value = self._next_id
        self._next_id += 1
        return value

    def mark_initialized(self, flag: str) -> None:
        self._flags.add(flag)

    def is_initialized(self, flag: str) -> bool:
        return flag in self._flags

    def require(self, flag: str, stage: str) -> None:
        if not self.is_initialized(flag):
            raise StageOrderError(f"{stage} needs {flag!r} to run first")

    def rng(self, stage: str) -> random.Random:
        return random.Random(derive_seed(self.seed, stage))

    def report(self, stage: str, message: str, **details: Any) -> Issue:
        """Record a recoverable fault and log it with enough context to reproduce."""
        issue = Issue(stage=stage, message=message, details=details)
        self.issues.append(issue)
        if details:
            extra = ", ".join(f"{k}={v!r}" for k, v in details.items())
            log.warning("[%s] %s (%s)", stage, message, extra)
        else:
            log.warning("[%s] %s", stage, message)
        return issue

    def issues_for(self, stage: str) -> list[Issue]:
        return [i for i in self.issues if i.stage == stage]

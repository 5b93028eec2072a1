"""
Session configuration for the CHC solving interface.

Configuration is split in two layers that must be applied in order:

1. Global parameters (``z3.set_param``). These are process-wide and are only
   read by z3 contexts created afterwards, so they are applied before the
   session creates its context.
2. Engine parameters, set on the ``z3.Fixedpoint`` object. These are per
   session. A global-only option set here is silently ignored by z3.

The Spacer tuning flags are fixed policy and are not fields of
``SessionConfig``; only the resource budget and diagnostics knobs are.
Per-repo overrides can be placed in ``.chc.yml``:

    resource-limit: 1000000
    timeout-ms: 20000
    counterexample-marker: summary
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml


# z3 "basic resources" budget per query. Counted by z3 internally and not
# related to wall-clock time.
DEFAULT_RESOURCE_LIMIT = 1000000

DEFAULT_COUNTEREXAMPLE_MARKER = "summary"

# Spacer options. These need to be set on the fixedpoint object.
# https://github.com/Z3Prover/z3/blob/master/src/muz/base/fp_params.pyg
SPACER_PARAMS: Tuple[Tuple[str, Any], ...] = (
    # Quantified lemma generalizer, for arrays and loops.
    ("fp.spacer.q3.use_qgen", True),
    ("fp.spacer.mbqi", False),
    # Do not ground proof obligations with values from a model.
    ("fp.spacer.ground_pobs", False),
    # These cost performance but keep what is needed to rebuild a counterexample.
    ("fp.xform.slice", False),
    ("fp.xform.inline_linear", False),
    ("fp.xform.inline_eager", False),
)


@dataclass(frozen=True)
class SessionConfig:
    """Immutable configuration handed to a session at construction."""
    resource_limit: int = DEFAULT_RESOURCE_LIMIT
    timeout_ms: Optional[int] = None
    counterexample_marker: str = DEFAULT_COUNTEREXAMPLE_MARKER

    def __post_init__(self):
        if self.resource_limit <= 0:
            raise ValueError("resource_limit must be positive")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive when set")

    def global_params(self) -> Tuple[Tuple[str, Any], ...]:
        """Process-wide parameters, applied before the context exists."""
        return (
            ("rewriter.pull_cheap_ite", True),
            ("rlimit", self.resource_limit),
        )

    def engine_params(self) -> Tuple[Tuple[str, Any], ...]:
        """Per-fixedpoint parameters."""
        params = SPACER_PARAMS
        if self.timeout_ms is not None:
            params = params + (("timeout", self.timeout_ms),)
        return params

    @classmethod
    def load(cls, repo_root: Path) -> "SessionConfig":
        """Load config from .chc.yml, falling back to defaults."""
        config_path = repo_root / ".chc.yml"
        if not config_path.exists():
            config_path = repo_root / ".chc.yaml"
        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, raw: dict[str, Any]) -> "SessionConfig":
        timeout = raw.get("timeout-ms", raw.get("timeout_ms"))
        return cls(
            resource_limit=int(raw.get("resource-limit",
                                       raw.get("resource_limit", DEFAULT_RESOURCE_LIMIT))),
            timeout_ms=int(timeout) if timeout is not None else None,
            counterexample_marker=str(raw.get("counterexample-marker",
                                              raw.get("counterexample_marker",
                                                      DEFAULT_COUNTEREXAMPLE_MARKER))),
        )

    def to_yaml(self) -> str:
        """Serialise to YAML string."""
        lines = [
            "# .chc.yml: CHC session configuration",
            f"resource-limit: {self.resource_limit}",
        ]
        if self.timeout_ms is not None:
            lines.append(f"timeout-ms: {self.timeout_ms}")
        lines.append(f"counterexample-marker: {self.counterexample_marker}")
        lines.append("")
        return "\n".join(lines)

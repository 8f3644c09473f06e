from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from speedread.segmentation import SegmentationPolicy

# -------------------------------
# Pace (milliseconds per word)
# -------------------------------
DEFAULT_PACE_MS = 250
MIN_PACE_MS = 50
MAX_PACE_MS = 2000
PACE_STEP_MS = 10

# -------------------------------
# Rendering
# -------------------------------
DEFAULT_WIDTH = 80
MIN_WIDTH = 1

# Punctuation pauses applied to the auto-advance interval
COMMA_PAUSE = 1.5
SENTENCE_PAUSE = 2.0

DEFAULT_STATE_DIR = Path.home() / ".config" / "speedread"
LOG_FILENAME = "speedread.log"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000


def clamp_pace(pace_ms: int) -> int:
    return max(MIN_PACE_MS, min(MAX_PACE_MS, int(pace_ms)))


@dataclass(frozen=True)
class ReaderConfig:
    pace_ms: int = DEFAULT_PACE_MS
    policy: SegmentationPolicy = SegmentationPolicy.WHITESPACE
    state_dir: Path = DEFAULT_STATE_DIR
    punctuation_pauses: bool = True
    width: int = DEFAULT_WIDTH
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReaderConfig":
        """Build a config from ``SPEEDREAD_*`` environment variables.

        Unparseable values are ignored and the default is kept.
        """
        env = os.environ if environ is None else environ
        cfg = cls()

        state_dir = env.get("SPEEDREAD_STATE_DIR")
        if state_dir:
            cfg = replace(cfg, state_dir=Path(state_dir).expanduser())

        pace = env.get("SPEEDREAD_PACE_MS")
        if pace:
            try:
                cfg = replace(cfg, pace_ms=clamp_pace(int(pace)))
            except ValueError:
                pass

        policy = env.get("SPEEDREAD_POLICY")
        if policy:
            try:
                cfg = replace(cfg, policy=SegmentationPolicy(policy.lower()))
            except ValueError:
                pass

        return cfg

    def with_overrides(self, **overrides) -> "ReaderConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        if "pace_ms" in values:
            values["pace_ms"] = clamp_pace(values["pace_ms"])
        return replace(self, **values)

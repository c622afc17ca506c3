from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel


def _env_flag(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes")


class LoaderSettings(BaseModel):
    # report capability mismatches at bind time instead of skipping silently
    strict_capabilities: bool = False
    # report link cycles (self-reference included) after the link phase
    detect_cycles: bool = True
    document: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LoaderSettings":
        return cls(
            strict_capabilities=_env_flag("RTXCONF_STRICT_CAPABILITIES", False),
            detect_cycles=_env_flag("RTXCONF_DETECT_CYCLES", True),
            document=(os.getenv("RTXCONF_DOCUMENT") or "").strip() or None,
            log_level=(os.getenv("RTXCONF_LOG_LEVEL") or "INFO").strip().upper(),
        )

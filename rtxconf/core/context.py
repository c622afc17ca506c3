from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .diagnostics import DiagnosticLog


@dataclass
class DeclareContext:
    """What a constructor may need besides its own settings subtree."""

    document_path: Path
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    @property
    def base_dir(self) -> Path:
        return self.document_path.parent

    def resolve_path(self, relative: str) -> Path:
        return self.base_dir / relative

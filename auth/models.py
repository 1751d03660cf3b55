"""Identity records handed out by the credential stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    password_hash: str
    created_at: datetime

    def public(self) -> Dict[str, Any]:
        """Fields safe to return to clients."""
        return {"id": self.id, "email": self.email}

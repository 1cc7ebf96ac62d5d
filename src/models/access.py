from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from src.models.products import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: UserRole


@dataclass(frozen=True)
class ClientScope:
    """Which counsellors' clients a caller may see; None means every counsellor."""

    counsellor_ids: Optional[FrozenSet[int]] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.counsellor_ids is None

    def allows(self, counsellor_id: int) -> bool:
        return self.counsellor_ids is None or counsellor_id in self.counsellor_ids

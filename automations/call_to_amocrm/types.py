from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CallSyncResult:
    """Итог переноса одного звонка в amoCRM"""

    lead_id: Optional[int]
    contact_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)  # ответ amoCRM на создание сделки

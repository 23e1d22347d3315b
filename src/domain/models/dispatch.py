from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class DispatchRecord:
    """An emergency dispatch call as stored in the record store.

    `fields` carries the full upstream record, including columns we do not
    model explicitly.
    """

    id: int
    timestamp: str | None = None
    summary: str | None = None
    generated_at: str | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


DeliveryStatus = Literal["sent", "skipped", "failed"]


@dataclass(frozen=True)
class DeliveryResult:
    status: DeliveryStatus
    message_id: int | None = None  # destination message id, if returned
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == "sent"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def sent(cls, message_id: int | None) -> "DeliveryResult":
        return cls(status="sent", message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> "DeliveryResult":
        return cls(status="failed", error=error)

    @classmethod
    def not_configured(cls) -> "DeliveryResult":
        return cls(status="skipped", error="Telegram not configured")

from typing import Any

from pydantic import BaseModel


class WebhookAck(BaseModel):
    status: str = "ok"
    detail: dict[str, Any] | None = None

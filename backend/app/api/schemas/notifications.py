"""Schemas for push notification requests and dispatch results."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PushNotificationRequest(BaseModel):
    tokens: List[str] = Field(..., min_length=1)
    title: str
    body: str
    icon: Optional[str] = None


class TokenDelivery(BaseModel):
    token: str
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class DeliveryReport(BaseModel):
    success_count: int = 0
    failure_count: int = 0
    responses: List[TokenDelivery] = Field(default_factory=list)

    @classmethod
    def from_deliveries(cls, deliveries: List[TokenDelivery]) -> "DeliveryReport":
        succeeded = sum(1 for item in deliveries if item.success)
        return cls(
            success_count=succeeded,
            failure_count=len(deliveries) - succeeded,
            responses=deliveries,
        )


class NotificationResult(BaseModel):
    success: bool
    response: Optional[DeliveryReport] = None
    error: Optional[str] = None

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class NextOpenResponse(BaseModel):
    date: str
    time: str


class AvailabilityResponse(BaseModel):
    isOpenNow: bool
    reason: str | None = None
    closesAt: str | None = None
    nextOpenAt: NextOpenResponse | None = None


class WeeklyHourRuleResponse(BaseModel):
    dayOfWeek: int
    isClosed: bool
    openTime: str | None = None
    closeTime: str | None = None


class DateExceptionResponse(BaseModel):
    date: str
    isClosed: bool
    openTime: str | None = None
    closeTime: str | None = None
    note: str | None = None


class StoreScheduleResponse(BaseModel):
    isOpen: bool
    hours: list[WeeklyHourRuleResponse] = Field(default_factory=list)
    exceptions: list[DateExceptionResponse] = Field(default_factory=list)


class CartItemResponse(BaseModel):
    lineId: str
    type: str
    label: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse
    size: str | None = None
    note: str | None = None


class CustomerResponse(BaseModel):
    name: str
    phone: str
    address: str
    street: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    reference: str | None = None
    complement: str | None = None


class PaymentResponse(BaseModel):
    method: str
    needsChange: bool
    changeFor: MoneyResponse | None = None


class OrderResponse(BaseModel):
    orderId: str
    status: str
    items: list[CartItemResponse] = Field(default_factory=list)
    customer: CustomerResponse
    payment: PaymentResponse
    total: MoneyResponse
    orderOrigin: str | None = None
    tableNumber: str | None = None
    createdByUserId: str | None = None
    createdAt: datetime
    updatedAt: datetime


class OrderTransitionResponse(BaseModel):
    order: OrderResponse
    fromStatus: str
    toStatus: str
    changed: bool
    messageType: str | None = None
    opensMessagingLink: bool = False
    cancelsPaymentFlow: bool = False


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class PendingOrdersCountResponse(BaseModel):
    count: int


class NotificationResponse(BaseModel):
    orderId: str
    messageType: str


class CashMovementResponse(BaseModel):
    movementId: str
    shiftId: str
    type: str
    amount: MoneyResponse
    note: str | None = None
    createdBy: str
    createdAt: datetime


class CashShiftResponse(BaseModel):
    shiftId: str
    isOpen: bool
    openedBy: str
    openedAt: datetime
    openingBalance: MoneyResponse
    closedAt: datetime | None = None
    closedBy: str | None = None
    closingBalance: MoneyResponse | None = None
    note: str | None = None


class CashTotalsResponse(BaseModel):
    sales: MoneyResponse
    supplies: MoneyResponse
    withdraws: MoneyResponse


class CashRegisterResponse(BaseModel):
    shift: CashShiftResponse | None = None
    movements: list[CashMovementResponse] = Field(default_factory=list)
    totals: CashTotalsResponse
    computedBalanceCents: int = 0

from __future__ import annotations

from typing import NewType

OrderId = NewType("OrderId", str)
UserId = NewType("UserId", str)
ProductId = NewType("ProductId", str)
FlavorId = NewType("FlavorId", str)
BorderId = NewType("BorderId", str)
CartLineId = NewType("CartLineId", str)
ShiftId = NewType("ShiftId", str)
MovementId = NewType("MovementId", str)

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PizzeriaSettings:
    name: str
    is_open: bool
    whatsapp: str
    address: str
    pix_key: str | None = None
    pix_name: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")

    def with_manual_open(self, is_open: bool) -> PizzeriaSettings:
        return replace(self, is_open=is_open)


DEFAULT_SETTINGS = PizzeriaSettings(
    name="Pizzaria Italiana",
    is_open=True,
    whatsapp="(89) 98134-7052",
    address="Av. Manoel Bezerra | Nº 189 | Centro",
)

"""Read-only order dataset shown alongside the call."""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from concierge.errors import OrderDataError


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    sku: str
    name: str
    quantity: int = Field(default=1, ge=1)


class OrderRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: str = Field(alias="id")
    customer_name: str = Field(alias="customerName")
    status: str
    placed_on: date = Field(alias="placedOn")
    items: tuple[OrderItem, ...] = ()
    eta: str | None = None
    notes: str | None = None


class OrderProvider(Protocol):
    def orders(self) -> tuple[OrderRecord, ...]: ...


class StaticOrderProvider:
    """Fixed, ordered order collection. Not consulted by the reply evaluator."""

    def __init__(self, records: Iterable[OrderRecord] = ()) -> None:
        self._records = tuple(records)

    def orders(self) -> tuple[OrderRecord, ...]:
        return self._records

    @classmethod
    def from_file(cls, path: Path) -> StaticOrderProvider:
        return cls(load_orders(path))


def load_orders(path: Path) -> list[OrderRecord]:
    """Load order records from a YAML or JSON list."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OrderDataError(f"cannot read order dataset {path}: {exc}") from exc

    try:
        payload = json.loads(raw) if path.suffix == ".json" else yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise OrderDataError(f"cannot parse order dataset {path}: {exc}") from exc

    if payload is None:
        return []
    if not isinstance(payload, list):
        raise OrderDataError(f"order dataset {path} must be a list of orders")
    try:
        return [OrderRecord.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise OrderDataError(f"invalid order in {path}: {exc}") from exc

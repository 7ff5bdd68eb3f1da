"""Entities shared with the mini-program, pay-order and user subsystems.

Only the attributes the callback pipeline reads are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass


PAY_ORDER_STATUS_INIT = "init"
PAY_ORDER_STATUS_SUCCESS = "success"
PAY_ORDER_STATUS_FAILED = "failed"


@dataclass
class Account:
    """Mini-program the callback is addressed to."""

    id: int | None
    app_id: str
    app_secret: str | None = None
    name: str | None = None


@dataclass
class Merchant:
    """WeChat Pay merchant credentials used to verify callbacks."""

    id: int | None
    mch_id: str
    api_v3_key: str | None = None
    platform_cert_serial: str | None = None


@dataclass
class PayOrder:
    """Payment order a callback refers to."""

    id: int | None
    app_id: str
    trade_no: str
    open_id: str | None = None
    attach: str | None = None
    total_fee: int | None = None
    status: str = PAY_ORDER_STATUS_INIT
    merchant: Merchant | None = None


@dataclass
class MiniProgramUser:
    """Local user known by its per-app ``open_id``."""

    id: int | None
    account_id: int | None
    open_id: str
    union_id: str | None = None

    def has_union_id(self) -> bool:
        return bool(self.union_id)


__all__ = [
    "Account",
    "Merchant",
    "MiniProgramUser",
    "PAY_ORDER_STATUS_FAILED",
    "PAY_ORDER_STATUS_INIT",
    "PAY_ORDER_STATUS_SUCCESS",
    "PayOrder",
]

"""
Payment Gateway Abstraction
=============================
Each gateway implements charge().
Registry pattern for gateway lookup by name.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional
from dataclasses import dataclass

logger = logging.getLogger("blackbasket.gateway")


@dataclass
class GatewayChargeRequest:
    """Input for charging an order."""
    amount: Decimal
    order_ref: str          # order id as string
    method: str = ""
    description: str = ""


@dataclass
class GatewayChargeResult:
    """Result of charge()."""
    success: bool
    reference: Optional[str] = None
    error_message: Optional[str] = None


class BaseGateway:
    """Abstract gateway interface."""
    name: str = ""
    label: str = ""

    def charge(self, req: GatewayChargeRequest) -> GatewayChargeResult:
        raise NotImplementedError


# ── Registry ──

_GATEWAYS: Dict[str, BaseGateway] = {}


def register_gateway(gw: BaseGateway):
    _GATEWAYS[gw.name] = gw


def unregister_gateway(name: str):
    _GATEWAYS.pop(name, None)


def get_gateway(name: str) -> Optional[BaseGateway]:
    return _GATEWAYS.get(name)

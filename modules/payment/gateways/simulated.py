"""
Simulated Gateway
==================
Approves any positive amount synchronously. No network traffic.
"""

import logging
import uuid

from modules.payment.gateways import (
    BaseGateway, GatewayChargeRequest, GatewayChargeResult, register_gateway,
)

logger = logging.getLogger("blackbasket.gateway.simulated")


class SimulatedGateway(BaseGateway):
    name = "simulated"
    label = "Simulated"

    def charge(self, req: GatewayChargeRequest) -> GatewayChargeResult:
        if req.amount is None or req.amount <= 0:
            return GatewayChargeResult(success=False, error_message="Amount must be positive")

        reference = f"SIM-{req.order_ref}-{uuid.uuid4().hex[:12].upper()}"
        logger.info(f"Simulated charge [{req.order_ref}]: {req.amount} -> {reference}")
        return GatewayChargeResult(success=True, reference=reference)


register_gateway(SimulatedGateway())

# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Business logic service layer."""

from ..core.result_types import Err, Ok, Result
from .binding import BindingService
from .payment_gateway import MockPaymentGateway, PaymentGateway
from .quote_lifecycle import QuoteLifecycleManager
from .quote_service import QuoteService
from .vehicle_data import VehicleEnricher

__all__ = [
    "BindingService",
    "Err",
    "MockPaymentGateway",
    "Ok",
    "PaymentGateway",
    "QuoteLifecycleManager",
    "QuoteService",
    "Result",
    "VehicleEnricher",
]

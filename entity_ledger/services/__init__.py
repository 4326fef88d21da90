"""Business logic services."""

from entity_ledger.services.ledger_service import LedgerService
from entity_ledger.services.entity_service import EntityService
from entity_ledger.services.report_service import ReportService
from entity_ledger.services.booking_service import BookingService
from entity_ledger.services.invoice_service import InvoiceService
from entity_ledger.services.bill_service import BillService
from entity_ledger.services.intercompany_service import IntercompanyService

__all__ = [
    "LedgerService",
    "EntityService",
    "ReportService",
    "BookingService",
    "InvoiceService",
    "BillService",
    "IntercompanyService",
]

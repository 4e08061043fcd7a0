"""Exception types shared across orderscan modules."""


class OrderScanError(Exception):
    """Base class for service errors."""


class ExtractionError(OrderScanError):
    """The extraction service could not be reached or returned an error."""


class ExportError(OrderScanError):
    """The spreadsheet could not be built or serialized."""

"""Domain errors raised by the sale lifecycle.

All are ValueError subclasses carrying a fixed message, so the pages can keep
showing `str(e)` while callers can still branch on the type.
"""


class FabshopError(ValueError):
    message = "Operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class CustomerNotFound(FabshopError):
    message = "Customer not found"


class SaleNotFound(FabshopError):
    message = "Sale not found"


class SlabNotFound(FabshopError):
    message = "Slab not found"


class SlabUnavailable(FabshopError):
    message = "Slab already sold"


class SinkUnavailable(FabshopError):
    message = "Sink not available"


class FaucetUnavailable(FabshopError):
    message = "Faucet not available"

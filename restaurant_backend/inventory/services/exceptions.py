# inventory/services/exceptions.py


class InventoryError(ValueError):
    """Domain error for stock workflows (insufficient stock, bad state, bad input)."""


class InsufficientStockError(InventoryError):
    def __init__(self, product, branch, available, requested):
        self.product = product
        self.branch = branch
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product.name} at {branch.name}. "
            f"Available: {available}, requested: {requested}"
        )

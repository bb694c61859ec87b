"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

ConflictError is the only error a caller should retry automatically; every
other error is terminal for the request that raised it.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """The allocator could not plan the full requested quantity."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(requested {requested}, available {available}, "
            f"short by {self.shortfall})"
        )

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class PoolPreconditionError(DomainException):
    """A pool operation cannot be applied with the current counters."""

    def __init__(self, batch_id: int, requested: int, available: int, message: str) -> None:
        self.batch_id = batch_id
        self.requested = requested
        self.available = available
        super().__init__(message)


class InsufficientShelfStockError(PoolPreconditionError):
    """Not enough unreserved shelf stock in a batch pool."""

    def __init__(self, batch_id: int, requested: int, available: int) -> None:
        super().__init__(
            batch_id,
            requested,
            available,
            f"Insufficient shelf stock in batch #{batch_id} "
            f"(need {requested}, have {available} available)",
        )


class InsufficientReservedStockError(PoolPreconditionError):
    """Not enough reserved stock in a batch pool to consume."""

    def __init__(self, batch_id: int, requested: int, available: int) -> None:
        super().__init__(
            batch_id,
            requested,
            available,
            f"Cannot consume {requested} from batch #{batch_id} "
            f"- only {available} currently reserved",
        )


class InsufficientWarehouseStockError(PoolPreconditionError):
    """Not enough on-hand (warehouse) stock in a batch pool."""

    def __init__(self, batch_id: int, requested: int, available: int) -> None:
        super().__init__(
            batch_id,
            requested,
            available,
            f"Insufficient warehouse stock in batch #{batch_id} "
            f"(need {requested}, have {available} on hand)",
        )


class InvalidTransitionError(DomainException):
    """The requested order status change is not an allowed edge."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move order from '{current}' to '{requested}'"
        )


class BatchMismatchError(DomainException):
    """A pinned batch does not belong to the requested product."""

    def __init__(self, batch_id: int, product_id: str) -> None:
        self.batch_id = batch_id
        self.product_id = product_id
        super().__init__(
            f"Batch #{batch_id} does not belong to product '{product_id}'"
        )


class ConflictError(DomainException):
    """A concurrent write was detected; the whole operation may be retried."""

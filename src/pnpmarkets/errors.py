"""Exceptions raised by the registry, scanner and market operations."""


class PnpError(Exception):
    """Base exception for pnpmarkets errors."""
    pass


class ValidationError(PnpError):
    """Raised on bad input: missing question, non-positive amount, unknown collateral."""
    pass


class ConfigurationError(PnpError):
    """Raised when configuration or environment is incomplete."""
    pass


class NotFound(PnpError):
    """Raised when a market record or registry entry does not exist."""

    def __init__(self, condition_id: str, what: str = "market") -> None:
        super().__init__(f"{what} not found: {condition_id}")
        self.condition_id = condition_id


class DuplicateConditionId(PnpError):
    """Raised when appending a conditionId that is already in the registry."""

    def __init__(self, condition_id: str) -> None:
        super().__init__(f"conditionId already registered: {condition_id}")
        self.condition_id = condition_id


class AlreadySettled(PnpError):
    """Raised when a market is already settled locally (record or registry)."""

    def __init__(self, condition_id: str, winner: str | None = None) -> None:
        msg = f"Market is already settled: {condition_id}"
        if winner:
            msg += f". Winner: {winner}"
        super().__init__(msg)
        self.condition_id = condition_id
        self.winner = winner


class NotDue(PnpError):
    """Raised when resolving a market whose trading window has not closed."""

    def __init__(self, condition_id: str, end_time_unix: int, now: int) -> None:
        super().__init__(
            f"Market {condition_id} is not due: ends at {end_time_unix}, now {now}"
        )
        self.condition_id = condition_id
        self.end_time_unix = end_time_unix
        self.now = now


class MarketClosed(PnpError):
    """Raised when trading on a market whose trading window has elapsed or that is settled."""
    pass


class AlreadySettledOnChain(PnpError):
    """Raised when the chain reports the market as already resolved."""

    def __init__(self, condition_id: str, winner: str | None = None) -> None:
        super().__init__(f"Market is already settled. Winner: {winner}")
        self.condition_id = condition_id
        self.winner = winner


class NotYetSettleable(PnpError):
    """Raised when settlement or redemption is attempted before it is allowed."""
    pass


class SettlementPending(PnpError):
    """Raised when due markets remain unsettled and new creation is refused."""

    def __init__(self, condition_ids: list[str]) -> None:
        super().__init__(
            f"{len(condition_ids)} due market(s) must be settled before creating: "
            + ", ".join(condition_ids)
        )
        self.condition_ids = condition_ids


class ExternalCallFailure(PnpError):
    """Raised when the chain collaborator fails (RPC error, allowance, revert)."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class RegistryLocked(PnpError):
    """Raised when the registry lock cannot be acquired within the timeout."""

    def __init__(self, lock_file: str, timeout: float) -> None:
        super().__init__(f"Registry is locked by another process ({lock_file}, waited {timeout}s)")
        self.lock_file = lock_file
        self.timeout = timeout

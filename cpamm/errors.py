"""Exception types for the pool engine.

Every failure an instruction can report is an ``AmmError`` subclass with a
stable ``code`` string. The dispatcher surfaces ``code`` to callers; tests and
clients should match on the class or the code, never on the message text.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for all pool instruction failures."""

    code: str = "AmmError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)


class Unauthorized(AmmError):
    """Signer is not allowed to perform an admin-gated operation."""

    code = "Unauthorized"


class NoPendingClaim(AmmError):
    """``claim_admin`` was called while no admin nomination is pending."""

    code = "NoPendingClaim"


class InvalidFeeConfig(AmmError):
    """Protocol fee share outside [0, MAX_PROTOCOL_FEE_SHARE]."""

    code = "InvalidFeeConfig"


class InvalidFee(AmmError):
    """Swap fee rate is not a proper fraction (0 <= num < den)."""

    code = "InvalidFee"


class InvalidMintOrder(AmmError):
    """Asset identifiers are not in canonical order (asset_low < asset_high)."""

    code = "InvalidMintOrder"


class SlippageExceeded(AmmError):
    """Output amount is below the caller-supplied minimum."""

    code = "SlippageExceeded"


class InsufficientInitialLiquidity(AmmError):
    """First deposit does not cover the minimum-liquidity lock."""

    code = "InsufficientInitialLiquidity"


class InsufficientLiquidityMinted(AmmError):
    """Deposit would mint zero LP shares."""

    code = "InsufficientLiquidityMinted"


class MathOverflow(AmmError):
    """A checked arithmetic operation left its integer width."""

    code = "MathOverflow"


class EmptyReserves(AmmError):
    """Swap requested against a pool with a zero reserve."""

    code = "EmptyReserves"


class InvalidAmount(AmmError):
    """Amount argument is not a valid non-negative integer for this operation."""

    code = "InvalidAmount"


class InsufficientFunds(AmmError):
    """Ledger account holds less than the requested transfer or burn."""

    code = "InsufficientFunds"


class PoolAlreadyExists(AmmError):
    code = "PoolAlreadyExists"


class PoolNotFound(AmmError):
    code = "PoolNotFound"


class PoolInvariantError(AmmError):
    """Raised when a post-state violates one or more pool invariants."""

    code = "PoolInvariantError"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")

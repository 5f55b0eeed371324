"""AMM error classes.

Every error carries a stable ``code`` equal to its class name so callers
(and the HTTP layer) can tell exactly which check failed, while the base
classes group them by kind:

- ValidationError: malformed input, rejected before any state is read
- StateError: input is well formed but the current state rejects it
- AuthorizationError: caller is not allowed to perform the operation
- DeadlineError: the caller-supplied deadline has passed
- AMMArithmeticError: checked integer arithmetic failed
"""

from typing import ClassVar


class AMMError(Exception):
    """Base error for AMM operations."""

    code: ClassVar[str] = "AMMError"

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.code = cls.__name__


# --- Validation ---


class ValidationError(AMMError, ValueError):
    """Input rejected before any state was read."""

    pass


class ZeroAddress(ValidationError):
    """The zero address is not a valid asset or recipient."""

    pass


class InvalidAddress(ValidationError):
    """Address is not 0x followed by 40 hex characters."""

    pass


class DuplicateAsset(ValidationError):
    """Both sides of a pair are the same asset."""

    pass


class InvalidPath(ValidationError):
    """Swap path must name at least two assets."""

    pass


class InvalidTo(ValidationError):
    """Swap recipient may not be one of the pair's own tokens."""

    pass


class ZeroAmount(ValidationError):
    """Amount must be positive."""

    pass


class InsufficientInputAmount(ValidationError):
    """Swap input is zero."""

    pass


# --- State ---


class StateError(AMMError):
    """Request rejected by the current state; nothing was committed."""

    pass


class PairExists(StateError):
    """A pair for this canonical key is already registered."""

    pass


class PairNotFound(StateError):
    """No pair is registered for a hop of the path."""

    pass


class InvalidOutput(StateError):
    """Requested swap outputs are not servable by the pool."""

    pass


class InsufficientOutputAmount(InvalidOutput):
    """Output is zero or below the caller's minimum."""

    pass


class InsufficientLiquidity(InvalidOutput):
    """Pool reserves cannot cover the request."""

    pass


class ExcessiveInputAmount(StateError):
    """Required input exceeds the caller's maximum."""

    pass


class InsufficientAAmount(StateError):
    """Optimal amount of token A is below the caller's minimum."""

    pass


class InsufficientBAmount(StateError):
    """Optimal amount of token B is below the caller's minimum."""

    pass


class InsufficientLiquidityMinted(StateError):
    """Deposit would mint zero shares."""

    pass


class InsufficientLiquidityBurned(StateError):
    """Burn would pay out zero of at least one token."""

    pass


class InvariantViolation(StateError):
    """Fee-adjusted reserve product would decrease."""

    pass


class Locked(StateError):
    """Pair entry point re-entered while already executing."""

    pass


class InsufficientBalance(StateError):
    """Ledger holder does not own enough of the asset."""

    pass


class InsufficientAllowance(StateError):
    """Spender is not approved for enough of the asset."""

    pass


# --- Authorization / deadline ---


class AuthorizationError(AMMError):
    """Caller is not permitted to perform the operation."""

    pass


class Unauthorized(AuthorizationError):
    """Only the factory owner may change protocol settings."""

    pass


class DeadlineError(AMMError):
    """Request arrived after the caller-supplied deadline."""

    pass


class Expired(DeadlineError):
    """Current time is past the deadline."""

    pass


# --- Arithmetic ---


class AMMArithmeticError(AMMError, ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class Overflow(AMMArithmeticError):
    """Value exceeds its fixed width."""

    pass


class Underflow(AMMArithmeticError):
    """Subtraction would produce a negative result."""

    pass


class DivisionByZero(AMMArithmeticError):
    """Division or modulo by zero."""

    pass

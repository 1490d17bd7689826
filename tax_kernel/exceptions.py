"""
Typed Exception Hierarchy for the Tax Kernel.

Every failure of a public operation is reported as a typed exception with a
machine-readable ``code`` class attribute and structured attributes.  Callers
catch by type, never by parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from TaxKernelError:

    TaxKernelError (base)
    |
    +-- AuthorizationError
    |   +-- UnauthorizedError
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidMintError
    |   +-- InvalidAccountError
    |   +-- InvalidIdentityError
    |
    +-- FeeError
    |   +-- TaxSplitMismatchError
    |   +-- InsufficientNetAmountError
    |   +-- MathOverflowError
    |
    +-- ConfigError
    |   +-- AlreadyInitializedError
    |   +-- ConfigNotInitializedError
    |   +-- CapacityExceededError
    |
    +-- LedgerError
        +-- UnsupportedInstructionError
        +-- LedgerAccountNotFoundError
        +-- InsufficientFundsError
        +-- OwnerMismatchError
        +-- MintAuthorityError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Authorization   | UNAUTHORIZED                | Caller/account owner != required principal
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_AMOUNT              | Zero amount
                | INVALID_MINT                | Account asset != expected mint
                | INVALID_ACCOUNT             | Raw account record too short
                | INVALID_IDENTITY            | Not a 32-byte identity
----------------|-----------------------------|-----------------------------------------
Fee             | TAX_SPLIT_MISMATCH          | founder + marketing fee != total tax
                | INSUFFICIENT_NET_AMOUNT     | Net leg would be zero or negative
                | MATH_OVERFLOW               | Product exceeds u64 / input out of range
----------------|-----------------------------|-----------------------------------------
Config          | ALREADY_INITIALIZED         | initialize() on an existing record
                | CONFIG_NOT_INITIALIZED      | Operation before initialize()
                | CAPACITY_EXCEEDED           | Registry list is full
----------------|-----------------------------|-----------------------------------------
Ledger          | UNSUPPORTED_INSTRUCTION     | Unknown opcode or malformed payload
                | LEDGER_ACCOUNT_NOT_FOUND    | No token account / mint at that key
                | INSUFFICIENT_FUNDS          | Source balance below amount
                | OWNER_MISMATCH              | Signer does not own the account
                | MINT_AUTHORITY_MISMATCH     | Signer is not the mint authority

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH SPECIFIC EXCEPTIONS:

    try:
        kernel.transfer_with_tax(...)
    except TaxSplitMismatchError as e:
        # Flooring produced an inconsistent split for this amount
        reject(amount=e.amount, code=e.code)
    except AuthorizationError as e:
        log.warning("transfer_rejected", extra={"code": e.code})

2. NOTHING IS RETRIED. Every error aborts the whole operation; the
   surrounding transaction rolls back every leg that was already issued.
"""


class TaxKernelError(Exception):
    """
    Base exception for all tax kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "TAX_KERNEL_ERROR"


# Authorization


class AuthorizationError(TaxKernelError):
    """Base exception for principal mismatches."""

    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedError(AuthorizationError):
    """Caller or account owner does not match the required principal."""

    code: str = "UNAUTHORIZED"

    def __init__(self, actual: str, expected: str, role: str):
        self.actual = actual
        self.expected = expected
        self.role = role
        super().__init__(
            f"Unauthorized {role}: expected {expected}, got {actual}"
        )


# Validation


class ValidationError(TaxKernelError):
    """Base exception for malformed inputs."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError):
    """Amount must be strictly positive."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: int):
        self.amount = amount
        super().__init__(f"Invalid amount: {amount}")


class InvalidMintError(ValidationError):
    """An involved account holds a different asset than the expected mint."""

    code: str = "INVALID_MINT"

    def __init__(self, account: str, expected_mint: str, actual_mint: str):
        self.account = account
        self.expected_mint = expected_mint
        self.actual_mint = actual_mint
        super().__init__(
            f"Invalid mint for token account {account}: "
            f"expected {expected_mint}, got {actual_mint}"
        )


class InvalidAccountError(ValidationError):
    """Raw account record is malformed or shorter than the minimum layout."""

    code: str = "INVALID_ACCOUNT"

    def __init__(self, account: str, length: int, minimum: int):
        self.account = account
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Invalid account {account}: {length} bytes, need at least {minimum}"
        )


class InvalidIdentityError(ValidationError):
    """Value cannot be interpreted as a 32-byte identity."""

    code: str = "INVALID_IDENTITY"

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid identity {value!r}: {reason}")


# Fee arithmetic


class FeeError(TaxKernelError):
    """Base exception for fee computation failures."""

    code: str = "FEE_ERROR"


class TaxSplitMismatchError(FeeError):
    """
    founder_fee + marketing_fee != tax_total.

    Flooring each share separately can produce this for small amounts even
    when founder_bps + marketing_bps == tax_bps (e.g. amount=99 at 300/200/100).
    """

    code: str = "TAX_SPLIT_MISMATCH"

    def __init__(
        self,
        amount: int,
        tax_total: int,
        founder_fee: int,
        marketing_fee: int,
    ):
        self.amount = amount
        self.tax_total = tax_total
        self.founder_fee = founder_fee
        self.marketing_fee = marketing_fee
        super().__init__(
            f"Tax split mismatch for amount {amount}: "
            f"founder {founder_fee} + marketing {marketing_fee} != tax {tax_total}"
        )


class InsufficientNetAmountError(FeeError):
    """Amount is too small to leave a positive net leg after tax."""

    code: str = "INSUFFICIENT_NET_AMOUNT"

    def __init__(self, amount: int, tax_total: int):
        self.amount = amount
        self.tax_total = tax_total
        super().__init__(
            f"Insufficient amount after tax: amount {amount}, tax {tax_total}"
        )


class MathOverflowError(FeeError):
    """Fee arithmetic left the u64 working range."""

    code: str = "MATH_OVERFLOW"

    def __init__(self, amount: int, bps: int):
        self.amount = amount
        self.bps = bps
        super().__init__(f"Math overflow computing {bps} bps of {amount}")


# Configuration registry


class ConfigError(TaxKernelError):
    """Base exception for configuration registry errors."""

    code: str = "CONFIG_ERROR"


class AlreadyInitializedError(ConfigError):
    """The configuration record for this deployment already exists."""

    code: str = "ALREADY_INITIALIZED"

    def __init__(self, config_address: str):
        self.config_address = config_address
        super().__init__(f"Configuration already initialized at {config_address}")


class ConfigNotInitializedError(ConfigError):
    """No configuration record exists for this deployment yet."""

    code: str = "CONFIG_NOT_INITIALIZED"

    def __init__(self, config_address: str):
        self.config_address = config_address
        super().__init__(f"Configuration not initialized at {config_address}")


class CapacityExceededError(ConfigError):
    """A bounded registry list is full."""

    code: str = "CAPACITY_EXCEEDED"

    def __init__(self, registry: str, capacity: int):
        self.registry = registry
        self.capacity = capacity
        super().__init__(f"Registry {registry} is full (capacity {capacity})")


# Ledger primitive


class LedgerError(TaxKernelError):
    """Base exception for failures inside the ledger primitive."""

    code: str = "LEDGER_ERROR"


class UnsupportedInstructionError(LedgerError):
    """Instruction data does not match a known call shape."""

    code: str = "UNSUPPORTED_INSTRUCTION"

    def __init__(self, tag: int | None, length: int):
        self.tag = tag
        self.length = length
        super().__init__(
            f"Unsupported instruction: tag={tag}, data length={length}"
        )


class LedgerAccountNotFoundError(LedgerError):
    """No token account or mint is stored under the given key."""

    code: str = "LEDGER_ACCOUNT_NOT_FOUND"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Ledger account not found: {key}")


class InsufficientFundsError(LedgerError):
    """Source balance is below the requested amount."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, account: str, balance: int, amount: int):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds in {account}: balance {balance}, need {amount}"
        )


class OwnerMismatchError(LedgerError):
    """Signer is not the owner of the debited account."""

    code: str = "OWNER_MISMATCH"

    def __init__(self, account: str, owner: str, signer: str):
        self.account = account
        self.owner = owner
        self.signer = signer
        super().__init__(
            f"Owner mismatch on {account}: owner {owner}, signer {signer}"
        )


class MintAuthorityError(LedgerError):
    """Signer is not the current mint authority (or minting is locked)."""

    code: str = "MINT_AUTHORITY_MISMATCH"

    def __init__(self, mint: str, authority: str | None, signer: str):
        self.mint = mint
        self.authority = authority
        self.signer = signer
        super().__init__(
            f"Mint authority mismatch on {mint}: authority {authority}, signer {signer}"
        )

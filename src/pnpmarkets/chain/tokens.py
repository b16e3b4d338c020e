"""Well-known collateral tokens on Base mainnet and unit conversion."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, localcontext

from pnpmarkets.errors import ValidationError
from pnpmarkets.models import Collateral

TOKENS: dict[str, Collateral] = {
    "USDC": Collateral(symbol="USDC", address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", decimals=6),
    "WETH": Collateral(symbol="WETH", address="0x4200000000000000000000000000000000000006", decimals=18),
    "cbETH": Collateral(symbol="cbETH", address="0x2Ae3F1Ec7F1F5012CFEab0185bfc7aa3cf0DEc22", decimals=18),
}

# Outcome tokens are always 18 decimals.
OUTCOME_TOKEN_DECIMALS = 18
DEFAULT_TOKEN_DECIMALS = 18

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def resolve_collateral(collateral: str, decimals: int | None = None) -> Collateral:
    """Resolve a symbol (USDC, WETH, cbETH; case-insensitive) or 0x address to a Collateral.

    Unknown addresses default to 18 decimals unless given explicitly.
    """
    if not collateral:
        raise ValidationError("collateral is required")
    for symbol, token in TOKENS.items():
        if symbol.upper() == collateral.upper():
            if decimals is None:
                return token
            return token.model_copy(update={"decimals": decimals})
    if _ADDRESS_RE.match(collateral):
        return Collateral(
            symbol=collateral,
            address=collateral,
            decimals=DEFAULT_TOKEN_DECIMALS if decimals is None else decimals,
        )
    raise ValidationError(
        f'Unknown token "{collateral}". Use USDC, WETH, cbETH, or a 0x contract address.'
    )


def parse_decimal(value: str, name: str = "amount") -> Decimal:
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if not d.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return d


def require_positive(value: str, name: str = "amount") -> Decimal:
    d = parse_decimal(value, name)
    if d <= 0:
        raise ValidationError(f"{name} must be positive")
    return d


def parse_units(value: str, decimals: int, name: str = "amount") -> int:
    """Convert a human-readable decimal string to integer base units.

    "1.5" with 6 decimals -> 1500000. More fractional digits than decimals is an error.
    """
    d = parse_decimal(value, name)
    with localcontext() as ctx:
        ctx.prec = 80
        scaled = d.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"{name} {value!r} has more than {decimals} decimal places")
    return int(scaled)


def tx_url(explorer_url: str, tx_hash: str) -> str:
    return f"{explorer_url.rstrip('/')}/tx/{tx_hash}"

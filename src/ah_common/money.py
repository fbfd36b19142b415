"""Integer arithmetic utilities for auction amounts.

All prices, bids and balances are int (smallest currency unit). No float, no Decimal.
"""

BPS_DENOMINATOR = 10000


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def seller_income(amount: int, fee_rate_bps: int) -> int:
    """Seller's share of a winning bid, truncated (platform keeps the remainder).

    income = floor(amount * (10000 - fee_bps) / 10000)
    """
    if not (0 <= fee_rate_bps <= BPS_DENOMINATOR):
        raise ValueError(f"fee_rate_bps must be 0-{BPS_DENOMINATOR}, got {fee_rate_bps}")
    return amount * (BPS_DENOMINATOR - fee_rate_bps) // BPS_DENOMINATOR


def platform_fee(amount: int, fee_rate_bps: int) -> int:
    return amount - seller_income(amount, fee_rate_bps)

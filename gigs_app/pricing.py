"""
Turns a gig package selection into the price an order is created with.

The resolver is a pure function over an already loaded Gig: it reads the gig's
status and packages and never writes to the database.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from core.exceptions import GigUnavailable, InvalidPackage
from .models import Gig, GigPackage

URGENT_MULTIPLIER = Decimal('1.5')
PRIORITY_FEE_RATE = Decimal('0.5')
CENT = Decimal('0.01')


@dataclass(frozen=True)
class PriceQuote:
    package: GigPackage
    base_price: Decimal
    total_price: Decimal
    priority_fee: Optional[Decimal]
    delivery_time_in_days: int


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_price(gig: Gig, package_key: str, is_urgent: bool = False) -> PriceQuote:
    """
    Computes the order price for `package_key` of `gig`.

    An urgent order costs 1.5 times the package price; the surcharge of half the base
    price is reported separately as `priority_fee`. Non-urgent orders have no
    priority fee.

    Raises:
        GigUnavailable: the gig is not ACTIVE.
        InvalidPackage: the gig has no package of that type, or its price is not positive.
    """
    if gig.status != Gig.GigStatus.ACTIVE:
        raise GigUnavailable()

    package = next(
        (candidate for candidate in gig.packages.all() if candidate.package_type == package_key),
        None
    )
    if package is None:
        raise InvalidPackage(f"Gig {gig.pk} has no '{package_key}' package.")

    base_price = package.price
    if base_price is None or base_price <= 0:
        raise InvalidPackage(f"The '{package_key}' package of gig {gig.pk} has no valid price.")

    if is_urgent:
        total_price = quantize(base_price * URGENT_MULTIPLIER)
        priority_fee = quantize(base_price * PRIORITY_FEE_RATE)
    else:
        total_price = quantize(base_price)
        priority_fee = None

    return PriceQuote(
        package=package,
        base_price=base_price,
        total_price=total_price,
        priority_fee=priority_fee,
        delivery_time_in_days=package.delivery_time_in_days,
    )

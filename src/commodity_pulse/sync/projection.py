"""Display-list projection: filter by favorites, then sort."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from commodity_pulse.core.models import Quote, QuoteFilter, Symbol


def project(
    quotes: Iterable[Quote],
    quote_filter: QuoteFilter,
    favorites: Collection[Symbol],
) -> list[Quote]:
    """Return the quotes to display, in display order.

    With ``QuoteFilter.FAVORITES`` only favorited quotes are kept. The result
    puts favorites first, then orders by display name, with canonical
    catalog order as the final tiebreak, so the output does not depend on
    input order. Holds no state; safe to call on every read.
    """
    if quote_filter == QuoteFilter.FAVORITES:
        base = [q for q in quotes if q.symbol in favorites]
    else:
        base = list(quotes)

    return sorted(
        base,
        key=lambda q: (
            q.symbol not in favorites,
            q.commodity.display_name,
            q.commodity.canonical_index,
        ),
    )

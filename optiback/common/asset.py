from dataclasses import dataclass
from typing import Union

from optiback.common.size import Size


@dataclass(frozen=True)
class Asset:
    """
    A tradable instrument. No assumptions are made about the asset class, so stocks, futures and
    cryptocurrencies are all modelled the same way.

    Attributes:
        symbol: Ticker symbol, for example "AAPL" or "BTC-USD".
        type: Asset class, for example "STOCK" or "CRYPTO".
        currency: Currency the asset is denominated in.
        multiplier: Contract multiplier applied when valuing a size at a price.
    """
    symbol: str
    type: str = "STOCK"
    currency: str = "USD"
    multiplier: float = 1.0

    def value(self, size: Union[Size, int, float], price: float) -> float:
        """Value of `size` units at `price`, in the currency of the asset"""
        return float(size) * self.multiplier * price

    def __str__(self) -> str:
        return self.symbol

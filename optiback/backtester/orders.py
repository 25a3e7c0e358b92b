from dataclasses import dataclass

from optiback.common.asset import Asset
from optiback.common.size import Size


@dataclass(frozen=True)
class MarketOrder:
    """
    Order to buy (positive size) or sell (negative size) an asset at the next available price.
    """
    asset: Asset
    size: Size
    tag: str = ""

    def __post_init__(self):
        if not isinstance(self.size, Size):
            object.__setattr__(self, "size", Size(self.size))

    @property
    def buy(self) -> bool:
        return self.size.is_positive

    @property
    def sell(self) -> bool:
        return self.size.is_negative

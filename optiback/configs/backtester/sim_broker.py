from pydantic import Field

from ..base import BaseConfig


class SimBrokerConfig(BaseConfig):
    """
    Configuration for the simulated broker.

    Attributes:
        initial_deposit (float): Cash in the account at the start of a run.
        currency (str): Currency of the deposit.
        slippage (float): Slippage as a fraction of the execution price, always against the trade.
        fee_rate (float): Fee as a fraction of the traded value.
        allow_short_selling (bool): Whether orders may open or increase a short position.
    """
    initial_deposit: float = Field(1_000_000.0, gt=0, description="Starting cash")
    currency: str = Field("USD", min_length=1, description="Account currency")
    slippage: float = Field(0.0, ge=0, lt=1, description="Slippage as fraction of price")
    fee_rate: float = Field(0.0, ge=0, lt=1, description="Fee as fraction of trade value")
    allow_short_selling: bool = Field(True, description="Whether short selling is allowed")

    def execution_price(self, price: float, buying: bool) -> float:
        """Price after slippage, higher when buying and lower when selling"""
        return price * (1 + self.slippage) if buying else price * (1 - self.slippage)

    def calculate_fee(self, trade_value: float) -> float:
        return abs(trade_value) * self.fee_rate

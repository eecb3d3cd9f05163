"""TradeRecord - canonical swap."""

from pydantic import BaseModel


class TradeRecord(BaseModel):
    """Executed swap from the trade history feed."""

    timestamp: int  # seconds epoch
    status: str
    input_token: str  # normalized symbol
    output_token: str
    input_amount: float
    output_amount: float

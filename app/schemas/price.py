# app/schemas/price.py
from typing import Dict
from pydantic import BaseModel
from datetime import datetime


class CurrentPricesResponse(BaseModel):
    success: bool = True
    currency: str
    prices: Dict[str, float]
    fetched_at: datetime
    stale: bool

"""Request models for the Support Tracker API."""

import re
from typing import List, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-^=]+$")

# Booleans and numeric strings are rejected rather than coerced
SupportLevel = Union[StrictInt, StrictFloat]


class AddStockRequest(BaseModel):
    """Body of POST /stocks."""

    symbol: str = Field(
        ..., description="Ticker symbol (e.g. AAPL, PTT.BK)", min_length=1, max_length=20
    )
    support_levels: List[SupportLevel] = Field(
        ..., description="Support price levels, any order"
    )

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v):
        """Validate ticker symbol format."""
        v = v.strip().upper()
        if not SYMBOL_PATTERN.match(v):
            raise ValueError("Symbol may only contain letters, digits and . - ^ =")
        return v


class EditSupportLevelsRequest(BaseModel):
    """Body of PATCH /stocks/{symbol}."""

    support_levels: List[SupportLevel] = Field(..., description="Replacement support levels")

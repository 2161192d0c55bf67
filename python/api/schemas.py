"""
Shared API Schema Types
"""

from typing import Annotated

from pydantic import Field

# JSON bodies may carry NaN/Infinity literals; money fields reject them
Amount = Annotated[float, Field(allow_inf_nan=False)]

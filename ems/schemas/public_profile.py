"""
Public (token-addressed) profile schema
"""
from typing import Dict, Optional
from pydantic import BaseModel


class PublicProfileOut(BaseModel):
    """
    status is ACTIVE or EXPIRED. fields holds only the keys whose visibility
    flag is public; it is empty for an expired link.
    """
    status: str
    fields: Dict[str, Optional[str]]

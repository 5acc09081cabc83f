"""
Asset host schemas.
"""
from pydantic import BaseModel


class StoredAsset(BaseModel):
    """An uploaded asset: public URL plus the host's own identifier."""
    url: str
    public_id: str

from typing import Literal, Optional

from pydantic import BaseModel, Field


class BatchRequest(BaseModel):
    urls: str = Field(
        ...,
        description="Newline-separated list of URLs. Blank lines are ignored.",
        examples=["example.com\npurina.com/ar"],
    )
    transport: Optional[Literal["direct", "proxied"]] = None
    """How pages are fetched.

    ``"direct"``
        Request the URL as-is.

    ``"proxied"``
        Prefix the URL with the configured proxy base before requesting it.

    ``None`` (default)
        Use the configured ``default_transport``.
    """

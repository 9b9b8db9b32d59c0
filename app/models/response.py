from typing import Dict, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict

from app.models.page import PageError, PageRecord
from app.models.schema import SchemaRecord

RecordT = TypeVar("RecordT")


class BatchResult(BaseModel, Generic[RecordT]):
    """Records and errors of one batch, both in input order.

    Every input URL appears in exactly one of the two lists.
    """

    model_config = ConfigDict(frozen=True)

    records: List[RecordT]
    errors: List[PageError]


class MetadataBatchResponse(BaseModel):
    records: List[PageRecord]
    errors: List[PageError]
    rows: List[Dict[str, str]]


class SchemaBatchResponse(BaseModel):
    records: List[SchemaRecord]
    errors: List[PageError]


class ProxyAccessResponse(BaseModel):
    url: str

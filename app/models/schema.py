from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from app.models.page import NOT_AVAILABLE

SchemaState = Literal["none", "other_types", "article"]
Severity = Literal["error", "warning", "ok"]


class AuthorInfo(BaseModel):
    type: str = NOT_AVAILABLE
    name: str = NOT_AVAILABLE
    url: str = NOT_AVAILABLE


class PublisherInfo(BaseModel):
    type: str = NOT_AVAILABLE
    name: str = NOT_AVAILABLE
    logo: str = NOT_AVAILABLE


class ArticleFields(BaseModel):
    """Flat view of the chosen JSON-LD entity.  Missing values are ``"N/A"``."""

    schema_type: str = NOT_AVAILABLE
    headline: str = NOT_AVAILABLE
    name: str = NOT_AVAILABLE
    description: str = NOT_AVAILABLE
    date_published: str = NOT_AVAILABLE
    date_modified: str = NOT_AVAILABLE
    main_entity_of_page: str = NOT_AVAILABLE
    image_url: str = NOT_AVAILABLE
    author: AuthorInfo = AuthorInfo()
    publisher: PublisherInfo = PublisherInfo()


class SchemaStatus(BaseModel):
    """What the page's JSON-LD says about the presence of an ``Article``."""

    status: SchemaState
    severity: Severity
    message: Optional[str] = None
    schema_types: List[str] = []
    selected_schema: Optional[Dict[str, Any]] = None


class SchemaRecord(BaseModel):
    """Result of the structured-data batch for one URL."""

    url: str
    type: str
    element: Optional[str] = None
    status: SchemaStatus
    fields: Optional[ArticleFields] = None

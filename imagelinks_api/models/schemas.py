from typing import List, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Administrator login credentials."""

    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=500)


class LinkDocument(BaseModel):
    """Stored link record as returned by the list endpoint."""

    url: str = Field(..., description="Image URL")
    tag: str = Field(..., description="Category tag")
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    ratio: float = Field(default=0.0, ge=0.0, description="width / height, 0 when unknown")


class ImageInfo(BaseModel):
    """Randomly selected image."""

    model_config = {"populate_by_name": True}

    url: str
    tag: str
    width: int
    height: int
    aspect_ratio: str = Field(
        ...,
        alias="aspectRatio",
        description="Ratio formatted with two decimals",
        examples=["1.78"],
    )


class ImageInfoResponse(BaseModel):
    success: bool = True
    image: ImageInfo


class OperationResponse(BaseModel):
    """Outcome of an administrative operation."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable, count-bearing summary")
    count: Optional[int] = Field(
        default=None,
        description="Catalog size after the operation, when relevant",
    )


class LinkListResponse(BaseModel):
    model_config = {"populate_by_name": True}

    success: bool = True
    links: List[LinkDocument] = Field(default_factory=list)
    total_hits: int = Field(default=0, ge=0, alias="totalHits")


class TagCount(BaseModel):
    tag: str
    count: int = Field(..., ge=1)


class TagsResponse(BaseModel):
    success: bool = True
    total_links: int = Field(default=0, ge=0, alias="totalLinks")
    tags: List[TagCount] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class RootResponse(BaseModel):
    model_config = {"populate_by_name": True}

    name: str
    version: str
    total_hits: int = Field(default=0, alias="totalHits")
    api: str = "/api"
    docs: str = "/docs"
    health: str = "/health"


class HealthResponse(BaseModel):
    #Health check response.

    status: str = Field(
        default="healthy",
        description="Service health status",
    )
    version: str = Field(
        ...,
        description="API version",
    )
    store_connected: bool = Field(
        default=False,
        description="Whether the key-value store answered",
    )


class ErrorResponse(BaseModel):
    #Error response.

    success: bool = Field(default=False)
    error: str = Field(
        ...,
        description="Error type",
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    detail: Optional[str] = Field(
        default=None,
        description="Additional error details",
    )

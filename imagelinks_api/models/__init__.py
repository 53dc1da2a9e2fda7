from imagelinks_api.models.schemas import (
    LoginRequest,
    LinkDocument,
    ImageInfo,
    ImageInfoResponse,
    OperationResponse,
    LinkListResponse,
    TagCount,
    TagsResponse,
    RootResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "LoginRequest",
    "LinkDocument",
    "ImageInfo",
    "ImageInfoResponse",
    "OperationResponse",
    "LinkListResponse",
    "TagCount",
    "TagsResponse",
    "RootResponse",
    "HealthResponse",
    "ErrorResponse",
]

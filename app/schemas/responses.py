"""Standardized API Response Schemas"""

from typing import Generic, TypeVar, Optional, Any
from pydantic import BaseModel, Field, ConfigDict


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.
    
    Example:
        {
            "success": true,
            "data": {...},
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: T
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.
    
    Example:
        {
            "success": false,
            "error": {
                "code": "NOT_FOUND",
                "message": "Assignment not found"
            }
        }
    """
    success: bool = False
    error: ErrorDetail


class PaginationMeta(BaseModel):
    """Pagination metadata"""
    page: int = Field(..., ge=1, description="Current page number")
    page_size: int = Field(..., ge=1, le=100, description="Items per page")
    total: int = Field(..., ge=0, description="Total number of items")
    total_pages: int = Field(..., ge=0, description="Total number of pages")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Paginated response with metadata.
    
    Example:
        {
            "success": true,
            "data": [...],
            "meta": {
                "page": 1,
                "page_size": 10,
                "total": 50,
                "total_pages": 5
            },
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: list[T]
    meta: PaginationMeta
    message: str = "Operation successful"


class BulkItemResult(BaseModel):
    """Outcome of one item in a bulk request"""
    key: str
    success: bool
    id: Optional[Any] = None
    error: Optional[str] = None


class BulkResult(BaseModel):
    """
    Per-item report for bulk operations. Items run independently, so a
    failure never rolls back the ones that succeeded.
    """
    succeeded: int = 0
    failed: int = 0
    results: list[BulkItemResult] = []

    def record(self, key: str, success: bool, id: Any = None, error: Optional[str] = None) -> None:
        self.results.append(BulkItemResult(key=key, success=success, id=id, error=error))
        if success:
            self.succeeded += 1
        else:
            self.failed += 1

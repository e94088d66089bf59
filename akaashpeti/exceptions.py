"""Custom exception hierarchy for the AkaashPeti API."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Lookup errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SHARED_ITEM_NOT_FOUND = "SHARED_ITEM_NOT_FOUND"
    LINK_SHARE_NOT_FOUND = "LINK_SHARE_NOT_FOUND"

    # Public links
    LINK_EXPIRED = "LINK_EXPIRED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Auth & access control
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    ACCESS_DENIED = "ACCESS_DENIED"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    RATE_LIMITED = "RATE_LIMITED"

    # Backend errors
    DATABASE_ERROR = "DATABASE_ERROR"
    OBJECT_STORE_ERROR = "OBJECT_STORE_ERROR"
    UNKNOWN_STORAGE_BACKEND = "UNKNOWN_STORAGE_BACKEND"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    ORPHANED_BLOB = "ORPHANED_BLOB"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """
    Base exception for all AkaashPeti errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class FileRecordNotFoundError(AppException):
    """File row missing (or not visible to the requester)."""

    def __init__(self, file_id: str):
        super().__init__(
            f"File not found: {file_id}",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"file_id": file_id}
        )


class FolderNotFoundError(AppException):
    """Folder row missing (or not visible to the requester)."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class UserNotFoundError(AppException):
    """Recipient or account lookup failed."""

    def __init__(self, identifier: str):
        super().__init__(
            "Recipient user not found",
            ErrorCode.USER_NOT_FOUND,
            status_code=404,
            details={"user": identifier}
        )


class SharedItemNotFoundError(AppException):

    def __init__(self, share_id: str):
        super().__init__(
            f"Share not found: {share_id}",
            ErrorCode.SHARED_ITEM_NOT_FOUND,
            status_code=404,
            details={"share_id": share_id}
        )


class LinkShareNotFoundError(AppException):
    """Unknown share token or link id. Tokens are never echoed back."""

    def __init__(self, link_id: Optional[str] = None):
        if link_id is None:
            super().__init__(
                "Invalid or expired link",
                ErrorCode.LINK_SHARE_NOT_FOUND,
                status_code=404,
            )
        else:
            super().__init__(
                f"Link share not found: {link_id}",
                ErrorCode.LINK_SHARE_NOT_FOUND,
                status_code=404,
                details={"link_id": link_id}
            )


class LinkExpiredError(AppException):
    """Public link exists but its ``expires_at`` has passed."""

    def __init__(self, expires_at: str):
        super().__init__(
            "Link expired",
            ErrorCode.LINK_EXPIRED,
            status_code=410,
            details={"expires_at": expires_at}
        )


class ValidationError(AppException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(AppException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(AppException):
    """Authenticated user lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class AccessDeniedError(AppException):
    """Requester neither owns the item nor appears on any share grant for it."""

    def __init__(self, item_type: str, item_id: str):
        super().__init__(
            "Access denied",
            ErrorCode.ACCESS_DENIED,
            status_code=403,
            details={"item_type": item_type, "item_id": item_id}
        )


class InsufficientRoleError(AppException):
    """Requester has a grant on the item, but not with the required role."""

    def __init__(self, item_type: str, item_id: str, required_role: str, role: str):
        super().__init__(
            f"{required_role.capitalize()} role required",
            ErrorCode.INSUFFICIENT_ROLE,
            status_code=403,
            details={
                "item_type": item_type,
                "item_id": item_id,
                "required_role": required_role,
                "role": role,
            }
        )


class DatabaseError(AppException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )


class ObjectStoreError(AppException):
    """The remote object store rejected or failed a request."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.OBJECT_STORE_ERROR,
            status_code=500,
            details=details
        )


class UnknownStorageBackendError(AppException):
    """File row names a storage backend this server cannot serve from."""

    def __init__(self, file_id: str, backend: Optional[str]):
        super().__init__(
            "Unknown storage backend",
            ErrorCode.UNKNOWN_STORAGE_BACKEND,
            status_code=500,
            details={"file_id": file_id, "storage_backend": backend}
        )


class PersistenceFailedError(AppException):
    """Neither the object store nor local disk accepted the upload.

    Details name the backends only; the underlying errors are logged by the
    caller and can carry server paths.
    """

    def __init__(self):
        super().__init__(
            "Upload failed: object storage and local disk are both unavailable",
            ErrorCode.PERSISTENCE_FAILED,
            status_code=500,
            details={"primary": "unavailable", "fallback": "unavailable"}
        )


class OrphanedBlobError(AppException):
    """Bytes were written but the metadata row could not be inserted.

    The blob is left in place for manual reconciliation; the details name
    the backend and key holding it.
    """

    def __init__(self, storage_backend: str, storage_key: str, original_error: Optional[Exception] = None):
        details = {"storage_backend": storage_backend, "storage_key": storage_key}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            "File bytes were stored but the file record could not be saved",
            ErrorCode.ORPHANED_BLOB,
            status_code=500,
            details=details
        )

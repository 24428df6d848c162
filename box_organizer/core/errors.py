"""
core/errors.py
--------------
Domain error taxonomy shared by services and routes.

Services raise these; they never build HTTP responses. main.py maps every
AppError to a JSON body {"error": message} with the class status code, so a
route only needs to catch an error when it wants to translate it.

Families:
  400  validation / invalid operation
  403  forbidden (membership and role checks)
  404  not found (also used when a resource exists but is not visible)
  409  conflict
  500  upstream failure (store or identity provider)
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ── 400 ───────────────────────────────────────────────────────────────────────

class ValidationFailed(AppError):
    """Carries a {field: first message} mapping."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, str]] = None,
    ) -> None:
        self.details = details or {}
        if message is None and self.details:
            message = next(iter(self.details.values()))
        super().__init__(message)


class InvalidOperationError(AppError):
    status_code = 400
    default_message = "Invalid operation"


class MaxDepthExceededError(AppError):
    status_code = 400
    default_message = "Maximum location hierarchy depth (5 levels) exceeded"


class MaxChildrenExceededError(AppError):
    status_code = 400
    default_message = "Maximum number of child locations (100) reached for this parent"


class WorkspaceMismatchError(AppError):
    status_code = 400
    default_message = "Resource belongs to a different workspace"

    def __init__(self, resource: Optional[str] = None, message: Optional[str] = None) -> None:
        if message is None and resource:
            message = f"{resource.replace('_', ' ').capitalize()} belongs to a different workspace"
        super().__init__(message)


# ── 403 ───────────────────────────────────────────────────────────────────────

class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class WorkspaceMembershipError(ForbiddenError):
    default_message = "You are not a member of this workspace"


class InsufficientPermissionsError(ForbiddenError):
    default_message = "Insufficient permissions"


class WorkspaceOwnershipError(ForbiddenError):
    default_message = "Only the workspace owner can perform this operation"


class OwnerRemovalError(ForbiddenError):
    default_message = "The workspace owner cannot be removed"


# ── 404 ───────────────────────────────────────────────────────────────────────

class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class WorkspaceNotFoundError(NotFoundError):
    default_message = "Workspace not found"


class LocationNotFoundError(NotFoundError):
    default_message = "Location not found"


class ParentNotFoundError(NotFoundError):
    default_message = "Parent location not found"


class BoxNotFoundError(NotFoundError):
    default_message = "Box not found"


class QrCodeNotFoundError(NotFoundError):
    default_message = "QR code not found"


class UserAccountNotFoundError(NotFoundError):
    default_message = "User account not found"


# ── 409 ───────────────────────────────────────────────────────────────────────

class ConflictError(AppError):
    status_code = 409
    default_message = "Resource conflict"


class SiblingConflictError(ConflictError):
    default_message = "A location with this name already exists at this level"


class DuplicateMemberError(ConflictError):
    default_message = "User is already a member of this workspace"


class QrCodeAlreadyAssignedError(ConflictError):
    default_message = "QR code is already assigned to a box"


# ── 500 ───────────────────────────────────────────────────────────────────────

class AccountDeletionError(AppError):
    status_code = 500
    default_message = "Account deletion failed"

    def __init__(self, message: Optional[str] = None, stage: Optional[str] = None) -> None:
        self.stage = stage
        super().__init__(message)


class AuthRevocationError(AccountDeletionError):
    default_message = "Identity revocation failed"

"""Domain exceptions"""
from typing import Dict, Optional


class DomainError(Exception):
    """Base exception of the domain layer"""
    pass


class ValidationError(DomainError):
    """Malformed input, with field-level detail"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        detail = "; ".join(f"{field}: {message}" for field, message in errors.items())
        super().__init__(f"Invalid certificate data: {detail}")


class DuplicateError(DomainError):
    def __init__(self, field: str, value: Optional[str] = None):
        self.field = field
        self.value = value
        if field == "parcel_id":
            message = f"Parcel {value} already has a certificate that is not revoked."
        else:
            message = f"Duplicate {field}: {value}"
        super().__init__(message)


class GenerationExhaustedError(DomainError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not generate unique certificate numbers after {attempts} attempts.")


class AssetResolutionDegraded(DomainError):
    """Raised inside the asset pipeline only; recorded as the fallback reason"""
    pass


class CertificateNotFoundError(DomainError):
    def __init__(self, key: str):
        super().__init__(f"Certificate not found: {key}")


class InvalidTransitionError(DomainError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change certificate status from '{current}' to '{target}'.")


class ImmutableCertificateError(DomainError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"A certificate in status '{status}' can no longer be edited or deleted.")


class DecodeFailedError(DomainError):
    def __init__(self, reason: str = "no readable code found"):
        super().__init__(f"Could not read the verification code: {reason}")


class UserNotFoundError(DomainError):
    def __init__(self):
        super().__init__("User not found.")


class InvalidCredentialsError(DomainError):
    def __init__(self):
        super().__init__("Invalid credentials.")


class PermissionDeniedError(DomainError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Administrator role required to {action}.")

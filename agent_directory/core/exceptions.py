class AppError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, entity: str, id: str):
        super().__init__(f"{entity} not found: {id}", status_code=404)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, status_code=401)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class SerializationError(AppError):
    """Content cannot be rendered as deterministic JSON text."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422)


class StorageError(AppError):
    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message, status_code=503)


class VersionConflictError(AppError):
    def __init__(self, entity_id: str, attempts: int):
        super().__init__(
            f"Could not allocate a version number for {entity_id} after {attempts} attempts",
            status_code=409,
        )
        self.entity_id = entity_id
        self.attempts = attempts

class LinkError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(LinkError):
    status_code = 400
    message = "Invalid request"


class ConflictError(LinkError):
    status_code = 409
    message = "Code already exists"


class NotFoundError(LinkError):
    status_code = 404
    message = "Link not found"


class ExhaustionError(LinkError):
    status_code = 500
    message = "Failed to generate unique code"


class StoreError(LinkError):
    status_code = 500
    message = "Database error"

"""Error types raised by the persistence layer and mapped to HTTP responses.

NotFound and InvalidInput are ordinary, caller-visible outcomes. RecordTooLarge
and RegionConflict are programming errors and surface as internal errors.
"""


class TaskManagerError(Exception):
    """Base exception for all task manager errors."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class NotFound(TaskManagerError):
    """The referenced id (or id pair) does not exist."""

    def __init__(self, message: str):
        super().__init__(message, "NOT_FOUND", 404)


class InvalidInput(TaskManagerError):
    """Well-formed request that breaks a domain rule given current state."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_INPUT", 400)


class RecordTooLarge(TaskManagerError):
    def __init__(self, type_name: str, size: int, max_size: int):
        super().__init__(
            f"{type_name} encodes to {size} bytes, exceeding the {max_size} byte bound",
            "RECORD_TOO_LARGE",
            500,
        )
        self.size = size
        self.max_size = max_size


class RegionConflict(TaskManagerError):
    def __init__(self, region_id: int, owner: str, requested_by: str):
        super().__init__(
            f"Region {region_id} is already allocated to {owner!r}, cannot allocate it to {requested_by!r}",
            "REGION_CONFLICT",
            500,
        )
        self.region_id = region_id

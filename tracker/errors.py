from typing import Optional


class TrackerError(Exception):
    """Base class for every error the tracker core raises."""


class ValidationError(TrackerError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    @classmethod
    def from_details(cls, details: dict) -> "ValidationError":
        return cls(details.get("message", "invalid input"), details.get("field"))


class DuplicateCategoryError(TrackerError):
    def __init__(self, category: str):
        super().__init__(f"Budget for {category} already exists")
        self.category = category


class NotFoundError(TrackerError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} with ID {entity_id} does not exist")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(TrackerError):
    """Reading or writing a stored collection failed."""

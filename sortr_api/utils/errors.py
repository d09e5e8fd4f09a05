from typing import Optional

CHILDREN_REASON = "has child locations"
BOXES_REASON = "has boxes"


class HierarchyError(Exception):
    """
    Base for every rejection raised by the location hierarchy.
    `status_code` is the HTTP status the API layer answers with.
    """
    status_code = 400
    default_message = "Location request rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class LocationValidationError(HierarchyError):
    default_message = "Validation failed"


class LocationNotFound(HierarchyError):
    status_code = 404
    default_message = "Location not found"


class InvalidParent(HierarchyError):
    default_message = "Parent location not found"


class CircularReference(HierarchyError):
    default_message = "Cannot create circular reference in location hierarchy"


class HasDependents(HierarchyError):
    def __init__(self, reason: str, count: int):
        self.reason = reason
        self.count = count
        if reason == CHILDREN_REASON:
            message = (f"Cannot delete location with {count} child location(s). "
                       f"Move or delete child locations first.")
        elif reason == BOXES_REASON:
            message = f"Cannot delete location with {count} box(es). Remove boxes first."
        else:
            message = f"Cannot delete location: {reason} ({count})"
        super().__init__(message)

"""
Error taxonomy for the billing core.

Services raise these unmodified; the HTTP layer in billing.main maps them to
status codes. Nothing is persisted when one of them is raised.
"""


class BillingError(Exception):
    """Base class for all billing errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    """Malformed or out-of-range input (non-positive amounts, empty item list, bad rate)"""

    status_code = 422


class NotFoundError(BillingError):
    """Referenced invoice or customer does not exist"""

    status_code = 404

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(BillingError):
    """Invoice-number collision under concurrent creation; the caller may retry"""

    status_code = 409

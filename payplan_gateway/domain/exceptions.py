"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class OrganizationNotFoundError(DomainException):
    """Organization or its fee configuration does not exist"""

    def __init__(self, organization_id):
        super().__init__(f"Organization {organization_id} not found")
        self.organization_id = organization_id


class DebtNotFoundError(DomainException):
    """Debt snapshot could not be found by the lookup service"""

    def __init__(self, debt_id):
        super().__init__(f"Debt {debt_id} not found")
        self.debt_id = debt_id


class LookupServiceError(DomainException):
    """Debt/organization lookup service returned an error or is unavailable"""

    pass


class ScoringServiceError(DomainException):
    """Scoring collaborator returned an error or is unavailable"""

    pass


class ScheduleValidationError(DomainException):
    """Custom schedule failed validation; carries the full result"""

    def __init__(self, result):
        super().__init__(f"Invalid custom schedule: {', '.join(result.errors)}")
        self.result = result


class InvariantViolation(DomainException, ValueError):
    """Caller broke a precondition (e.g. non-positive amount reaching a calculator)"""

    pass

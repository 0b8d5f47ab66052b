"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    entity = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class ClientNotFoundError(NotFoundError):
    entity = "Client"


class ContractNotFoundError(NotFoundError):
    entity = "Contract"


class InvoiceNotFoundError(NotFoundError):
    entity = "Invoice"


class DocumentNotFoundError(NotFoundError):
    entity = "Document"


class InvoicesAlreadyGeneratedError(DomainException):
    """Invoices were already generated for the contract"""

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(f"Invoices already generated for contract {contract_id}")


class InvalidInputError(DomainException):
    """Input is malformed or violates an entity invariant"""

    pass


class ExternalServiceError(DomainException):
    """A remote collaborator failed or timed out"""

    pass


class ReportGenerationError(ExternalServiceError):
    """Revenue report service failed"""

    pass

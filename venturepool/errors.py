# venturepool/errors.py : erreurs métier du ledger

from decimal import Decimal


class LedgerError(Exception):
    """Erreur métier avec un type stable, convertie en réponse JSON par main.py"""

    kind = "ledger_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    kind = "validation_error"
    status_code = 422

    def __init__(self, message: str, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])


class AuthenticationError(LedgerError):
    kind = "authentication_error"
    status_code = 401


class AuthorizationError(LedgerError):
    kind = "authorization_error"
    status_code = 403


class NotFoundError(LedgerError):
    kind = "not_found"
    status_code = 404


class ConflictError(LedgerError):
    kind = "conflict"
    status_code = 409


class InsufficientBalanceError(LedgerError):
    kind = "insufficient_balance"
    status_code = 400

    def __init__(self, available: Decimal, requested: Decimal):
        super().__init__(
            f"Solde insuffisant: disponible {available:.2f}, demandé {requested:.2f}"
        )
        self.available = available
        self.requested = requested


class NoInvestorsError(LedgerError):
    kind = "no_investors"
    status_code = 400

    def __init__(self, business_name: str):
        super().__init__(f"Aucun investisseur dans \"{business_name}\": rien à répartir")
        self.business_name = business_name

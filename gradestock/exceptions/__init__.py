"""Custom exceptions for the GradeStock application."""

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="Ocorreu um erro interno", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(AppError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class InvalidQuantityError(BusinessLogicError):
    """Raised when a quantity is not a positive integer."""
    def __init__(self, raw_value=None):
        super().__init__(
            'Quantidade inválida: informe um número inteiro maior que zero',
            payload={'quantity': raw_value if raw_value is None else str(raw_value)}
        )

class NotFoundError(AppError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Registro não encontrado", payload=None):
        super().__init__(message, 404, payload)

class InsufficientStockError(BusinessLogicError):
    """Raised when an OUT adjustment exceeds the stock of the selected record/size."""
    def __init__(self, product_name, size, required, available):
        message = (
            f"Estoque insuficiente para {product_name} ({size}): "
            f"solicitado {required}, disponível {available}"
        )
        super().__init__(
            message,
            status_code=409,
            payload={'size': size, 'requested': required, 'available': available}
        )

class UnauthorizedError(AppError):
    """Raised when the caller is not logged in as admin."""
    def __init__(self, message="Acesso não autorizado", status_code=401):
        super().__init__(message, status_code)

class RemoteWriteError(AppError):
    """
    A write against the database failed.

    The current operation was aborted and the session rolled back; the
    caller must reload authoritative state before trying again.
    """
    def __init__(self, message="Erro ao gravar no banco de dados", payload=None):
        rv = dict(payload or ())
        rv['reload'] = True
        super().__init__(message, 502, rv)

class RemoteReadError(AppError):
    """Reading authoritative state from the database failed."""
    def __init__(self, message="Erro ao conectar com o banco de dados"):
        super().__init__(message, 503)

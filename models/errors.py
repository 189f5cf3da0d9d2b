"""Exception hierarchy shared by the services and the HTTP layer."""

from __future__ import annotations


class IrrigationError(Exception):
    """Base exception for all service errors.

    ``public_message`` is the only text ever returned to API callers.
    """

    public_message = "Erro interno do servidor"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class ValidationError(IrrigationError):
    """A required field is missing or carries an unsupported value."""

    public_message = "Todos os campos são obrigatórios"


class AuthError(IrrigationError):
    """Identity provider rejected the request."""


class InvalidCredentials(AuthError):
    public_message = "Credenciais inválidas"


class EmailAlreadyInUse(AuthError):
    public_message = "Este e-mail já está em uso. Por favor, use outro."


class WeakPassword(AuthError):
    public_message = "A senha fornecida é fraca. Escolha uma senha mais forte."


class InvalidEmail(AuthError):
    public_message = "O e-mail fornecido não é válido."


class NotFoundError(IrrigationError):
    """User, device data or alerts are absent."""

    public_message = "Dados do usuário não encontrados"


class UserNotFound(NotFoundError):
    public_message = "Usuário não encontrado"


class UpstreamError(IrrigationError):
    """Identity provider or storage backend failed (network, quota, ...)."""

    def __init__(self, message: str, *, provider_code: str | None = None) -> None:
        self.provider_code = provider_code
        super().__init__(message)

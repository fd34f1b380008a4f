"""
ERROS DE DOMÍNIO
=================

Os serviços levantam estes erros; a API converte cada um
no status HTTP correspondente (ver leaddesk.api.main).
"""

from typing import Optional


class CRMError(Exception):
    """Base de todos os erros de negócio."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CRMError):
    """Campo ausente ou inválido na entrada."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(CRMError):
    """Entidade referenciada não existe."""

    status_code = 404


class AuthorizationError(CRMError):
    """Role ou dono do registro não permite a operação."""

    status_code = 403


class UnauthenticatedError(CRMError):
    """Sem identidade válida."""

    status_code = 401


class InternalError(CRMError):
    """Falha inesperada de persistência."""

    status_code = 500

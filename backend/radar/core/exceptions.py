"""
Exceções da aplicação.

Cada exceção carrega o status HTTP que o handler global devolve ao cliente.
Falhas das APIs externas (UpstreamError) são isoladas no ConsultaService e só
chegam ao cliente pelas rotas de passthrough ou quando as duas APIs falham.
"""
from fastapi import status


class RadarError(Exception):
    """Erro base da aplicação"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(RadarError):
    """Parâmetro ausente ou inválido"""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(RadarError):
    """Registro duplicado (ex.: e-mail já cadastrado)"""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(RadarError):
    """Token ausente, inválido ou expirado"""
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(RadarError):
    """Usuário sem permissão para a operação"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(RadarError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(RadarError):
    """Token ou URL obrigatórios não configurados"""


class UpstreamError(RadarError):
    """API externa respondeu com erro"""
    status_code = status.HTTP_502_BAD_GATEWAY


class UpstreamTimeoutError(UpstreamError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class BadGatewayError(RadarError):
    """Nenhuma das APIs externas respondeu"""
    status_code = status.HTTP_502_BAD_GATEWAY

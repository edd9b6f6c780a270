# Schemas module
from radar.schemas.user import (
    LoginRequest,
    UsuarioToken,
    LoginResponse,
    MeResponse,
    UsuarioCreate,
    UsuarioUpdate,
    UsuarioResponse,
    UsuarioDesativadoResponse,
)
from radar.schemas.consulta import (
    CamelModel,
    DadosHabilitacao,
    DadosCadastrais,
    CamposConsulta,
    ConsultaCompletaResponse,
    HistoricoItem,
    HistoricoDataItem,
)

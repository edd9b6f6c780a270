# API Routes module
from radar.api.routes.auth import router as auth_router
from radar.api.routes.admin import router as admin_router
from radar.api.routes.consulta import router as consulta_router
from radar.api.routes.historico import router as historico_router

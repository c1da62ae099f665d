from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.errors import ServiceError, service_error_handler
from core.logging import configure_logging

from auth.routes.auth_router import auth_router
from user.router import user_router
from organization.router import organization_router
from employee.router import employee_router
from department.router import department_router
from team.router import team_router
from workpolicy.router import work_router
from notification.router import notification_router
from securetoken.router import unlock_router
import models_bootstrap

configure_logging()

openapi_tags = [
    {
        "name": "Organizations",
        "description": "Tenant lifecycle",
    },
    {
        "name": "Employees",
        "description": "Invitations, directory and termination",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(title=settings.APP_NAME, openapi_tags=openapi_tags)
app.add_exception_handler(ServiceError, service_error_handler)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(auth_router, prefix="/api")
app.include_router(user_router, prefix="/api")
app.include_router(organization_router, prefix="/api")
app.include_router(employee_router, prefix="/api")
app.include_router(department_router, prefix="/api")
app.include_router(team_router, prefix="/api")
app.include_router(work_router, prefix="/api")
app.include_router(notification_router, prefix="/api")
app.include_router(unlock_router, prefix="/api")


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}

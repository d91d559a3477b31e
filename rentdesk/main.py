# rentdesk/main.py

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentdesk.api.middleware import (
    AccessLogMiddleware,
    CorrelationIdMiddleware,
    RequestContextMiddleware,
)
from rentdesk.api.routers import (
    admin,
    auth,
    companies,
    fleet,
    health,
    locations,
    logs,
    people,
    rental,
    stats,
)
from rentdesk.application.exceptions import (
    ApplicationError,
    ConflictError,
    EntityNotFoundError,
    StoreError,
)
from rentdesk.config.logging import configure_logging
from rentdesk.config.settings import get_settings
from rentdesk.domain.exceptions import DomainError, DomainValidationError
from rentdesk.security.exceptions import (
    AuthenticationError,
    AuthorizationError,
    RateLimitExceededError,
    SecurityError,
)

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestContext -> AccessLog.
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


def error_response(status_code: int, message: str, details=None, headers=None) -> JSONResponse:
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return error_response(400, "Validation error", details)


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return error_response(400, exc.message, exc.details)


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return error_response(400, exc.message)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request, exc: AuthenticationError):
    return error_response(401, exc.message, headers={"WWW-Authenticate": "Bearer"})


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request, exc: AuthorizationError):
    return error_response(403, exc.message)


@app.exception_handler(RateLimitExceededError)
async def rate_limit_error_handler(request, exc: RateLimitExceededError):
    return error_response(
        429,
        exc.message,
        details={"retry_after": exc.retry_after},
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(SecurityError)
async def security_error_handler(request, exc: SecurityError):
    return error_response(403, exc.message)


@app.exception_handler(EntityNotFoundError)
async def not_found_error_handler(request, exc: EntityNotFoundError):
    return error_response(404, exc.message)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request, exc: ConflictError):
    return error_response(409, exc.message)


@app.exception_handler(StoreError)
async def store_error_handler(request, exc: StoreError):
    logger.error("store_error_response", extra={"path": request.url.path, "error": exc.message})
    return error_response(500, "Internal server error")


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return error_response(500, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return error_response(500, "Internal server error")


# Routers
app.include_router(health.router)
app.include_router(auth.router, prefix="/auth")
app.include_router(admin.router)
app.include_router(logs.router, prefix="/logs")
app.include_router(stats.router, prefix="/stats")
app.include_router(companies.router, prefix="/companies")
app.include_router(locations.router, prefix="/locations")
app.include_router(locations.districts_router, prefix="/districts")
app.include_router(fleet.router, prefix="/cars")
app.include_router(fleet.car_templates_router, prefix="/car-templates")
app.include_router(rental.clients_router, prefix="/clients")
app.include_router(rental.contracts_router, prefix="/contracts")
app.include_router(rental.bookings_router, prefix="/bookings")
app.include_router(rental.payments_router, prefix="/payments")
app.include_router(rental.tasks_router, prefix="/tasks")
app.include_router(people.managers_router, prefix="/managers")
app.include_router(people.users_router, prefix="/users")

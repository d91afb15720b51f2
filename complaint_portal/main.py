import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from complaint_portal.core.config import Settings, load_settings, validate_runtime_config
from complaint_portal.core.errors import NotificationError
from complaint_portal.core.logging_config import configure_logging
from complaint_portal.database import build_engine, build_session_factory, ensure_schema
from complaint_portal.routes import auth_routes, complaint_routes, user_routes
from complaint_portal.services.notifications import NotificationPublisher

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains; preload',
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'geolocation=(), microphone=(), camera=()',
}


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Submitted values (passwords included) are never echoed back.
    errors = [{key: value for key, value in error.items() if key != 'input'} for error in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': jsonable_encoder(errors)},
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Database error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


async def handle_notification_error(request: Request, exc: NotificationError) -> JSONResponse:
    logger.error('Notification error on %s %s: %s', request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Failed to queue notification'},
    )


def create_app(
    settings: Settings | None = None,
    publisher: NotificationPublisher | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)

    engine = build_engine(settings.database_url)

    app = FastAPI(title='Student Complaint Portal')
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.publisher = publisher or NotificationPublisher.from_url(settings.redis_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Accept', 'Authorization', 'Content-Type', 'X-CSRF-Token'],
        max_age=3600,
    )

    @app.middleware('http')
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response

    @app.on_event('startup')
    def initialize_database() -> None:
        logger.info('Application starting (env=%s, port=%s)', settings.app_env, settings.http_port)
        try:
            ensure_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')

    @app.on_event('shutdown')
    def release_resources() -> None:
        app.state.publisher.close()
        engine.dispose()
        logger.info('Application stopped')

    @app.get('/health', response_class=PlainTextResponse)
    def health() -> str:
        return 'OK'

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(NotificationError, handle_notification_error)

    app.include_router(auth_routes.router, prefix='/api/auth')
    app.include_router(user_routes.router, prefix='/api/users')
    app.include_router(complaint_routes.router, prefix='/api/complaints')

    return app


def run() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings)
    uvicorn.run(create_app(settings), host='0.0.0.0', port=settings.http_port)


if __name__ == '__main__':
    run()

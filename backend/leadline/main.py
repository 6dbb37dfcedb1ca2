"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadline.adapters.email import EmailSender
from leadline.adapters.telegram import TelegramSender
from leadline.api import health, leads
from leadline.config import Settings, settings
from leadline.services.dispatcher import LeadNotificationDispatcher
from leadline.services.lead_log import LeadLog


def configure_logging(debug: bool) -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def create_app(config: Settings = settings, dispatcher: LeadNotificationDispatcher | None = None) -> FastAPI:
    """Build the app. Channel senders are created once and shared by all requests."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        telegram = None
        if dispatcher is None:
            telegram = TelegramSender(config)
            app.state.dispatcher = LeadNotificationDispatcher(
                [EmailSender(config), telegram],
                timeout=config.channel_send_timeout,
            )
        else:
            app.state.dispatcher = dispatcher
        app.state.lead_log = LeadLog(config.leads_file_path, write_to_file=config.log_leads_to_file)
        structlog.get_logger().info("app_started", channels=app.state.dispatcher.configured_channels())
        yield
        if telegram is not None:
            await telegram.aclose()

    app = FastAPI(
        title=config.app_name,
        description="Lead capture and staff notification service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS - lead forms may be served from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    app.include_router(health.router)
    app.include_router(leads.router, prefix=config.api_prefix)

    @app.get("/")
    async def root():
        return {
            "name": config.app_name,
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


configure_logging(settings.debug)
app = create_app()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_routers
from .core.config import settings
from .core.logging_config import configure_logging
from .errors import register_exception_handlers
from .scheduler import SchedulerTrigger

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    trigger = None
    if settings.SCHEDULER_ENABLED:
        trigger = SchedulerTrigger()
        trigger.start()
    app.state.scheduler = trigger
    try:
        yield
    finally:
        if trigger is not None:
            trigger.stop()


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


register_exception_handlers(app)
register_routers(app)

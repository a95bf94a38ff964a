import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.db import SessionLocal, engine
from app.logging_config import configure_logging
from app.models import Base
from app.responses import install_error_handlers
from app.routers import auth, categories, dashboard, orders, products, suppliers
from app.security.headers import install_security_headers
from app.security.sessions import install_auth_session_middleware

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.create_tables_on_startup:
        Base.metadata.create_all(bind=engine)
        logger.info('Database tables verified')
    yield


app = FastAPI(title='Inventory API', version='1.0.0', lifespan=lifespan)
app.state.session_factory = SessionLocal

install_security_headers(app)
install_auth_session_middleware(app)
install_error_handlers(app)

app.include_router(auth.router)
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(suppliers.router)
app.include_router(orders.router)
app.include_router(dashboard.router)


@app.get('/health')
def health() -> dict:
    return {'ok': True, 'service': 'inventory-api'}

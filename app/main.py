from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.db.dynamo import DynamoGateway, PersistenceError
from app.routers import cash_flow, debts, entries, health, ledger, operational_costs
from app.utils.classifier import EntryClassifier
from app.utils.ledger import LedgerStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load the ledger once for the whole session
    store = LedgerStore(DynamoGateway())
    try:
        store.load()
    except PersistenceError as e:
        logger.error(f"Initial ledger load failed, starting empty: {e}")
    app.state.store = store
    app.state.classifier = EntryClassifier()
    yield
    # Shutdown: release the classifier HTTP client
    logger.info("Closing classifier client...")
    app.state.classifier.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)

# Root endpoint
@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}


# Register routers
app.include_router(health.router, prefix=f"{settings.API_PREFIX}", tags=["Health"])  # /api/health
app.include_router(cash_flow.router, prefix=f"{settings.API_PREFIX}/cash-flow", tags=["Cash Flow"])
app.include_router(operational_costs.router, prefix=f"{settings.API_PREFIX}/operational-costs", tags=["Operational Costs"])
app.include_router(debts.router, prefix=f"{settings.API_PREFIX}/debts", tags=["Debts"])
app.include_router(ledger.router, prefix=f"{settings.API_PREFIX}/ledger", tags=["Ledger"])
app.include_router(entries.router, prefix=f"{settings.API_PREFIX}/entries", tags=["Smart Entries"])

# venturepool/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from venturepool import config
from venturepool.database import make_engine, make_session_factory, check_connection, create_tables
from venturepool.errors import LedgerError
from venturepool.routes import (
    auth, users, businesses, investments, earnings, expenses, withdrawals, transactions, stats, me
)
import logging
import datetime

# Configuration du logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Démarrage de l'API Venture Pool...")

    if check_connection(app.state.engine):
        logger.info("✅ Connexion à la base de données établie")
        # En production, utiliser des migrations
        create_tables(app.state.engine)
    else:
        logger.error("❌ Impossible de se connecter à la base de données")

    yield

    logger.info("👋 Arrêt de l'API Venture Pool")
    app.state.engine.dispose()


async def ledger_error_handler(request: Request, exc: LedgerError):
    body = {"error": exc.kind, "detail": exc.message}
    fields = getattr(exc, "fields", None)
    if fields:
        body["fields"] = fields
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Champs manquants ou invalides: 422 avec la liste des champs en cause"""
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "detail": f"Champs requis ou invalides: {', '.join(fields)}",
            "fields": fields,
        },
    )


def create_app(database_url: str = None) -> FastAPI:
    """
    Construit l'application. Le moteur et la fabrique de sessions sont créés
    ici et posés sur app.state; rien n'est partagé au niveau du module.
    """
    app = FastAPI(
        title="Venture Pool API",
        description="Ledger d'un pool d'investissement partagé: parts, gains, dépenses et retraits",
        version="1.0.0",
        docs_url=None if config.is_production() else "/docs",
        redoc_url=None if config.is_production() else "/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Inscription, connexion et session"},
            {"name": "users", "description": "Membres du pool"},
            {"name": "businesses", "description": "Business et gérants"},
            {"name": "investments", "description": "Investissements par membre"},
            {"name": "earnings", "description": "Gains répartis au prorata"},
            {"name": "expenses", "description": "Dépenses réparties au prorata"},
            {"name": "withdrawals", "description": "Retraits sur le solde disponible"},
            {"name": "transactions", "description": "Journal des opérations"},
            {"name": "stats", "description": "Statistiques du pool"},
            {"name": "me", "description": "Vues personnelles"},
        ]
    )

    engine = make_engine(database_url or config.DATABASE_URL)
    app.state.engine = engine
    app.state.SessionLocal = make_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    for module in (auth, users, businesses, investments, earnings, expenses,
                   withdrawals, transactions, stats, me):
        app.include_router(module.router, prefix="/api")

    @app.get("/health")
    def health_check():
        """Endpoint de santé pour le monitoring"""
        db_status = check_connection(app.state.engine)
        return {
            "status": "healthy" if db_status else "unhealthy",
            "database": "connected" if db_status else "disconnected",
            "version": app.version,
            "timestamp": datetime.datetime.now().isoformat()
        }

    return app


app = create_app()

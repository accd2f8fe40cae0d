import os
import importlib
import logging
from datetime import date

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from alembic.config import Config
from alembic import command

# APScheduler imports
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from core.database import SessionLocal, settings
import core.sequences  # noqa: F401  registers document_sequences with the metadata

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# The directory where all application folders are located
APPS_DIRECTORY = "apps"
API_PREFIX = "/api/v1"

# --- Database Migration Function ---
def run_migrations():
    """Programmatically runs Alembic migrations."""
    logger.info("⏳ Running database migrations...")
    try:
        # Load Alembic configuration from the alembic.ini next to this file
        alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
        alembic_cfg.attributes["skip_logging_config"] = True
        command.upgrade(alembic_cfg, "head")
        logger.info("✅ Migrations complete.")
    except Exception:
        logger.exception("❌ An error occurred during migrations")
        raise

# --- Status Reconciliation Job ---
def reconcile_statuses(today: date = None):
    """Write the date-derived status back to warranties and invoices."""
    from apps.invoices.services import InvoiceService
    from apps.warranties.services import WarrantyService

    db = SessionLocal()
    try:
        expired = WarrantyService(db).expire_lapsed(today)
        overdue = InvoiceService(db).mark_overdue(today)
        logger.info(f"Reconciled statuses: {expired} warranty(ies) expired, {overdue} invoice(s) overdue")
        return {"warranties_expired": expired, "invoices_overdue": overdue}
    finally:
        db.close()

# Initialize the main FastAPI application
app = FastAPI(
    title="Motor Repair Shop API",
    description="Companies, motors, repair jobs, invoices and warranties for a motor-repair shop.",
    version="1.0.0",
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {"name": app.title, "version": app.version}

# --- Dynamic App Discovery and Router Inclusion ---
apps_path = os.path.join(os.path.dirname(__file__), APPS_DIRECTORY)

logger.debug(f"Searching for apps in: {apps_path}")

if not os.path.isdir(apps_path):
    logger.error(f"The directory '{APPS_DIRECTORY}' was not found.")
else:
    for item_name in sorted(os.listdir(apps_path)):
        app_dir = os.path.join(apps_path, item_name)

        if os.path.isdir(app_dir) and not item_name.startswith(('_', '.')):
            module_name = f"{APPS_DIRECTORY}.{item_name}.router"
            try:
                # Import the models from each app to ensure Alembic can detect them
                importlib.import_module(f'{APPS_DIRECTORY}.{item_name}.models')

                router_module = importlib.import_module(module_name)
                router_instance = getattr(router_module, "router", None)

                if router_instance and isinstance(router_instance, APIRouter):
                    app.include_router(
                        router_instance,
                        prefix=f"{API_PREFIX}/{item_name}",
                        tags=[item_name.replace('_', ' ').capitalize()]
                    )
                    logger.info(f"✅ Successfully loaded router from '{item_name}'.")
                else:
                    logger.warning(f"⚠️ Could not find a valid APIRouter named 'router' in '{module_name}'.")

            except ImportError as e:
                logger.error(f"❌ Failed to import router for '{item_name}': {e}")

# --global scheduler variable
scheduler = None

# --- Startup Event Handler ---
@app.on_event("startup")
def startup_event():
    """Run database migrations and start scheduler on application startup."""
    logger.info("🚀 Starting Motor Repair Shop API...")
    global scheduler
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        run_migrations()

    # Set up and start the scheduler
    if settings.ENABLE_SCHEDULER:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            reconcile_statuses,
            CronTrigger(hour=settings.RECONCILE_HOUR, minute=0),
            id="reconcile_statuses",
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"✅ Scheduler started, status reconciliation daily at {settings.RECONCILE_HOUR:02d}:00.")
    logger.info("Application is ready to serve requests.")

# --- Shutdown Event Handler ---
@app.on_event("shutdown")
def shutdown_event():
    """Shutdown the scheduler when the application stops."""
    global scheduler
    if scheduler:
        scheduler.shutdown()
        logger.info("✅ Scheduler shut down gracefully.")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from billing.routers import customers, invoices, payments
from billing.config import settings
from billing.errors import BillingError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

logger.info("=" * 60)
logger.info("Starting Billing API")
logger.info("=" * 60)
logger.info(f"Invoice numbering: {settings.invoice_number_prefix}{'0' * settings.invoice_number_width}")
logger.info(f"Default tax rate: {settings.default_tax_rate}%")
logger.info("=" * 60)

# Tables are managed by Alembic (see backend/alembic)

app = FastAPI(
    title="Billing API",
    description="Customers, invoices, line items and payments",
    version="1.0.0"
)


def parse_cors_origins(origins_str: str) -> list:
    """Parse comma-separated CORS origins into a list"""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include routers
app.include_router(customers.router)
app.include_router(invoices.router)
app.include_router(payments.router)


@app.get("/")
def root():
    return {"message": "Billing API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    """Translate ValidationError / NotFoundError / ConflictError into HTTP responses"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"},
    )

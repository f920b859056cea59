"""
esewa-pay - FastAPI Application

Demo server around the eSewa ePay v2 helpers: initiation redirect, success
callback validation and failure acknowledgment.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from . import __version__
from .config import settings
from .exceptions import DecodeError, EsewaError, InitiationError
from .api.payments import router as payments_router


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup (never the secret key)."""
    logger.info("Starting esewa-pay server...")
    logger.info(f"eSewa environment: {settings.environment.value}")
    logger.info(f"Mock gateway: {settings.use_mock_gateway}")
    logger.info(f"Callback base URL: {settings.public_base_url}")

    yield

    logger.info("Shutting down esewa-pay server...")


# Initialize FastAPI application
app = FastAPI(
    title="esewa-pay",
    description="eSewa ePay v2 payment initiation and callback validation",
    version=__version__,
    lifespan=lifespan,
)


# Exception handlers for eSewa errors
@app.exception_handler(InitiationError)
async def initiation_error_handler(request: Request, exc: InitiationError):
    """
    Handle failures to hand a payment over to eSewa.

    Returns 502 Bad Gateway: the upstream gateway was unreachable or refused.
    """
    logger.warning(
        f"Initiation error: {exc.error_code} - {exc.message}",
        extra={"details": exc.details}
    )

    return JSONResponse(status_code=502, content=exc.to_dict())


@app.exception_handler(DecodeError)
async def decode_error_handler(request: Request, exc: DecodeError):
    """
    Handle callback data that cannot be decoded.

    Returns 400 Bad Request: the callback cannot be trusted or even read.
    """
    logger.warning(f"Callback decode error: {exc.error_code} - {exc.message}")

    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(EsewaError)
async def esewa_error_handler(request: Request, exc: EsewaError):
    """Handle any other eSewa integration error."""
    logger.warning(f"eSewa error: {exc.error_code} - {exc.message}")

    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unexpected errors.

    Logs full exception for debugging but returns generic message to client.
    """
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "internal_error",
            "message": "An unexpected error occurred",
            "details": {}
        }
    )


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        Server status, version and eSewa environment
    """
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment.value,
        "mock_gateway": settings.use_mock_gateway,
    }


# Include API routers
app.include_router(payments_router, prefix="/api/payments", tags=["Payments"])


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn
    uvicorn.run(
        "esewapay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from healthtrack.config import settings
from healthtrack.db.session import engine
from healthtrack.db.base import Base
from healthtrack.api.v1 import auth, appointments, medications, profile, dashboard

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Auto-create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Health Tracker")


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # The request's session is rolled back when get_db closes it
    logger.error(f"Storage error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": f"Storage error: {exc}"})


# Include Routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(appointments.router, prefix="/api/v1/appointments", tags=["Appointments"])
app.include_router(medications.router, prefix="/api/v1/medications", tags=["Medications"])
app.include_router(profile.router, prefix="/api/v1/profile", tags=["Profile"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])


@app.get("/")
def root():
    return {"message": "System Operational"}

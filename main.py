import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth_routes import router as auth_router
from api.availability_routes import router as availability_router
from api.dashboard_routes import router as dashboard_router
from api.employee_routes import router as employee_router
from api.invitation_routes import router as invitation_router
from api.leave_request_routes import router as leave_request_router
from api.notification_routes import router as notification_router
from api.report_routes import router as report_router
from api.shift_routes import router as shift_router
from api.shift_swap_routes import router as shift_swap_router
from api.time_registration_routes import router as time_registration_router
from core.config import FRONTEND_URL, configure_logging
from db.seed import seed_admin
from db.session import init_db
from utils.datetime_helpers import format_utc_datetime, utc_now

# This file is the control center of the whole application

configure_logging()
logger = logging.getLogger(__name__)

# Always allow the configured frontend plus the usual local dev servers
allowed_origins_list = sorted({
    FRONTEND_URL,
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
})

logger.info("CORS: allowing origins %s", allowed_origins_list)


# When We Start, Create the DB Tables if they don't exist
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    seed_admin()
    yield


app = FastAPI(title="Rooster", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api"

app.include_router(auth_router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(invitation_router, prefix=API_PREFIX, tags=["Invitations"])
app.include_router(employee_router, prefix=API_PREFIX, tags=["Employees"])
app.include_router(shift_router, prefix=f"{API_PREFIX}/shifts", tags=["Shifts"])
app.include_router(time_registration_router, prefix=f"{API_PREFIX}/time-registrations", tags=["Time Clock"])
app.include_router(leave_request_router, prefix=f"{API_PREFIX}/leave-requests", tags=["Leave"])
app.include_router(availability_router, prefix=f"{API_PREFIX}/availability", tags=["Availability"])
app.include_router(shift_swap_router, prefix=f"{API_PREFIX}/shift-swaps", tags=["Shift Swaps"])
app.include_router(notification_router, prefix=f"{API_PREFIX}/notifications", tags=["Notifications"])
app.include_router(report_router, prefix=f"{API_PREFIX}/reports", tags=["Reports"])
app.include_router(dashboard_router, prefix=f"{API_PREFIX}/dashboard", tags=["Dashboard"])


@app.get(f"{API_PREFIX}/health", tags=["Health"])
def health():
    return {"status": "ok", "timestamp": format_utc_datetime(utc_now())}

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketing.constant_file import api_version
from ticketing.database import Base, engine
from ticketing.errors import APIError
from ticketing.logger import get_logger
from ticketing.middleware.rate_limiter import general_limiter
from ticketing.response_model import ErrorResponseModel

from ticketing.routes.admin_route import router as AdminRouter
from ticketing.routes.auth_route import router as AuthRouter
from ticketing.routes.category_route import router as CategoryRouter
from ticketing.routes.entrypass_route import router as EntryPassRouter
from ticketing.routes.event_route import router as EventRouter
from ticketing.routes.exhibition_route import router as ExhibitionRouter
from ticketing.routes.payment_route import router as PaymentRouter
from ticketing.routes.rating_route import router as RatingRouter
from ticketing.routes.ticket_route import router as TicketRouter
from ticketing.routes.user_route import router as UserRouter

from ticketing.models.entrypass_model import EntryPass
from ticketing.models.event_model import Category, Event, Show
from ticketing.models.exhibition_model import Exhibition
from ticketing.models.payment_model import Payment
from ticketing.models.rating_model import Rating
from ticketing.models.settings_model import Settings
from ticketing.models.ticket_model import Ticket, TicketEvent
from ticketing.models.user_model import User

logger = get_logger("ticketing.app")

API_PREFIX = "/api/v1"

app = FastAPI(title="Event Ticketing API", version=api_version, dependencies=[Depends(general_limiter)])


# ----------------------- ERROR HANDLERS -----------------------
@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code,
                        content=ErrorResponseModel(exc.error, exc.status_code, exc.message))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code,
                        content=ErrorResponseModel(str(exc.detail), exc.status_code, str(exc.detail)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return JSONResponse(status_code=400, content=ErrorResponseModel(messages, 400, "Validation failed"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponseModel(str(exc) or "Server Error", 500, "Server Error"))


# ----------------------- ROUTERS -----------------------
@app.get(f"{API_PREFIX}/health", tags=["Health"])
async def health():
    return {"success": True, "message": "API is running", "version": api_version}


app.include_router(AuthRouter, tags=["Auth"], prefix=f"{API_PREFIX}/auth")
app.include_router(UserRouter, tags=["User"], prefix=f"{API_PREFIX}/users")
app.include_router(CategoryRouter, tags=["Category"], prefix=f"{API_PREFIX}/categories")
app.include_router(EventRouter, tags=["Event"], prefix=f"{API_PREFIX}/events")
app.include_router(TicketRouter, tags=["Ticket"], prefix=f"{API_PREFIX}/tickets")
app.include_router(PaymentRouter, tags=["Payment"], prefix=f"{API_PREFIX}/payments")
app.include_router(EntryPassRouter, tags=["EntryPass"], prefix=f"{API_PREFIX}/entrypass")
app.include_router(ExhibitionRouter, tags=["Exhibition"], prefix=f"{API_PREFIX}/exhibitions")
app.include_router(RatingRouter, tags=["Rating"], prefix=f"{API_PREFIX}/ratings")
app.include_router(AdminRouter, tags=["Admin"], prefix=f"{API_PREFIX}/admin")

# Create all tables (must be after importing all models)
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
except Exception as e:
    logger.warning("Could not create database tables: %s", e)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS", "DELETE", "PUT"],
    allow_headers=["*"],
)

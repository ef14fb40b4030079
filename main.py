import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auth import AuthService
from catalog import Catalog
from config import Settings, configure_logging, log_settings_summary
from database import ensure_indexes, get_database
from dependencies import get_auth_service, get_catalog, get_current_user, get_db, get_order_service
from errors import InternalError, MissingToken, ShopError
from notifications import OrderNotifier, build_notifier
from orders import OrderService
from schemas import (AuthResponse, MessageResponse, OrderCreate, OrderCreatedResponse, OrderView, Product,
                     TokenClaims, UserCreate, UserLogin)
from seed import seed_products

logger = logging.getLogger("shop")


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None,
               notifier: Optional[OrderNotifier] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_settings_summary(settings, logger)
        ensure_indexes(app.state.db)
        yield

    app = FastAPI(title="Shop API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db if db is not None else get_database(settings)
    app.state.notifier = notifier or build_notifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app: FastAPI):
    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, MissingToken) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(PyMongoError)
    async def datastore_error_handler(request: Request, exc: PyMongoError):
        logger.error("Datastore error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content={"detail": error.message})


def register_routes(app: FastAPI):
    @app.get("/")
    def root():
        return {"message": "Shop API is running"}

    @app.get("/api/health", response_model=MessageResponse)
    def health():
        return {"message": "Server is running!"}

    # Auth endpoints
    @app.post("/api/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
    def register(payload: UserCreate, auth: AuthService = Depends(get_auth_service)):
        return auth.register(payload)

    @app.post("/api/login", response_model=AuthResponse)
    def login(payload: UserLogin, auth: AuthService = Depends(get_auth_service)):
        return auth.login(payload)

    # Catalog
    @app.get("/api/products", response_model=List[Product])
    def list_products(catalog: Catalog = Depends(get_catalog)):
        return catalog.list_products()

    # Orders
    @app.post("/api/orders", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
    def create_order(payload: OrderCreate, background_tasks: BackgroundTasks,
                     user: TokenClaims = Depends(get_current_user),
                     orders: OrderService = Depends(get_order_service)):
        order = orders.place_order(user, payload, schedule=background_tasks.add_task)
        return {"message": "Order created successfully", "order": order}

    @app.get("/api/orders", response_model=List[OrderView])
    def list_orders(user: TokenClaims = Depends(get_current_user),
                    orders: OrderService = Depends(get_order_service)):
        return orders.list_orders(user.user_id)

    # Replaces the whole catalog with the sample products
    @app.post("/api/seed-products", response_model=MessageResponse)
    def seed(db: Database = Depends(get_db)):
        seed_products(db)
        return {"message": "Sample products added successfully"}


app = create_app()


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)


if __name__ == "__main__":
    run()

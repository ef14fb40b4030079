from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from auth import AuthService, authenticate
from catalog import Catalog
from config import Settings
from orders import OrderService
from schemas import TokenClaims

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_auth_service(db: Database = Depends(get_db), settings: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(db, settings)


def get_catalog(db: Database = Depends(get_db)) -> Catalog:
    return Catalog(db)


def get_order_service(request: Request, db: Database = Depends(get_db),
                      catalog: Catalog = Depends(get_catalog)) -> OrderService:
    return OrderService(db, notifier=request.app.state.notifier, catalog=catalog)


def get_current_user(request: Request,
                     credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
                     settings: Settings = Depends(get_settings)) -> TokenClaims:
    claims = authenticate(credentials.credentials if credentials else None, settings)
    request.state.user = claims
    return claims

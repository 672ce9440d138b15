from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from treasurer_dashboard import __version__
from treasurer_dashboard.auth import bootstrap_admin_if_needed, get_current_identity, require_admin
from treasurer_dashboard.auth.crud import create_user, verify_user_credentials
from treasurer_dashboard.auth.security import DEFAULT_TOKEN_TTL, create_access_token
from treasurer_dashboard.config import Config, load_config
from treasurer_dashboard.db import detect_dialect, connect, init_db, redact_dsn
from treasurer_dashboard.errors import (
    ApiError,
    Conflict,
    InvalidCredentials,
    StoreFailure,
    install_error_handlers,
)
from treasurer_dashboard.ledger.crud import (
    create_event,
    create_transaction,
    list_events,
    list_transactions,
)
from treasurer_dashboard.models import MEMBER_ROLE, Identity
from treasurer_dashboard.util.time import utcnow


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


router = APIRouter()

MAX_PASSWORD_LENGTH = 4096


def get_config(request: Request) -> Config:
    return request.app.state.cfg


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock


@contextmanager
def _store_errors(what: str, message: str = StoreFailure.message) -> Iterator[None]:
    """Log unexpected store errors server-side; the client only sees `message`."""
    try:
        yield
    except ApiError:
        raise
    except Exception as e:
        _debug(f"Error {what}: {e!r}")
        raise StoreFailure(message) from e


# -----------------------------
# Health
# -----------------------------


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return "OK"


# -----------------------------
# Auth
# -----------------------------


class RegisterRequest(BaseModel):
    username: str
    # passlib refuses secrets longer than this.
    password: str = Field(max_length=MAX_PASSWORD_LENGTH)
    # Stored verbatim; anything other than "admin" acts as a member.
    role: str = MEMBER_ROLE


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, cfg: Config = Depends(get_config)) -> Dict[str, Any]:
    with _store_errors("registering user"):
        try:
            with connect(cfg.DB_DSN) as conn:
                user_id = create_user(
                    conn,
                    username=payload.username,
                    password=payload.password,
                    role=payload.role,
                )
        except ValueError as e:
            if str(e) == "username_exists":
                raise Conflict()
            raise

    return {"message": "User registered successfully", "userId": user_id}


@router.post("/login")
def login(
    payload: LoginRequest,
    cfg: Config = Depends(get_config),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Dict[str, Any]:
    with _store_errors("logging in"):
        with connect(cfg.DB_DSN) as conn:
            user_row = verify_user_credentials(conn, payload.username, payload.password)

    if user_row is None:
        raise InvalidCredentials()

    token = create_access_token(
        secret=cfg.AUTH_JWT_SECRET,
        user_id=int(user_row["id"]),
        role=str(user_row["role"]),
        now=clock(),
        ttl=DEFAULT_TOKEN_TTL,
    )
    return {"message": "Login successful", "token": token}


# -----------------------------
# Events
# -----------------------------


class EventCreate(BaseModel):
    name: str
    budget_allocated: Union[float, str]
    amount_spent: Union[float, str]
    status: str


@router.get("/events")
def get_events(
    _user: Identity = Depends(get_current_identity),
    cfg: Config = Depends(get_config),
) -> List[Dict[str, Any]]:
    with _store_errors("fetching events"):
        with connect(cfg.DB_DSN) as conn:
            return list_events(conn)


@router.post("/events", status_code=201)
def add_event(
    payload: EventCreate,
    _admin: Identity = Depends(require_admin),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    with _store_errors("adding event", "Error adding event"):
        with connect(cfg.DB_DSN) as conn:
            event_id = create_event(
                conn,
                name=payload.name,
                budget_allocated=payload.budget_allocated,
                amount_spent=payload.amount_spent,
                status=payload.status,
            )
    return {"message": "Event added successfully", "eventId": event_id}


# -----------------------------
# Transactions
# -----------------------------


class TransactionCreate(BaseModel):
    event_name: str
    amount: Union[float, str]
    date: str


@router.get("/transactions")
def get_transactions(
    _user: Identity = Depends(get_current_identity),
    cfg: Config = Depends(get_config),
) -> List[Dict[str, Any]]:
    with _store_errors("fetching transactions"):
        with connect(cfg.DB_DSN) as conn:
            return list_transactions(conn)


@router.post("/transactions", status_code=201)
def add_transaction(
    payload: TransactionCreate,
    _admin: Identity = Depends(require_admin),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    with _store_errors("adding transaction", "Error adding transaction"):
        with connect(cfg.DB_DSN) as conn:
            transaction_id = create_transaction(
                conn,
                event_name=payload.event_name,
                amount=payload.amount,
                date=payload.date,
            )
    return {"message": "Transaction added successfully", "transactionId": transaction_id}


# -----------------------------
# App factory
# -----------------------------


def create_app(
    cfg: Optional[Config] = None,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    """Build the API.

    Raises ConfigError before anything is served when required settings are missing.
    """
    cfg = (cfg or load_config()).validate()

    app = FastAPI(title="Treasurer Dashboard", version=__version__)
    app.state.cfg = cfg
    app.state.clock = clock

    origins = cfg.cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            # Browsers reject credentials with a wildcard origin.
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    install_error_handlers(app)
    app.include_router(router)

    # Ensure schema exists.
    init_db(cfg.DB_DSN)
    _debug(f"Using {detect_dialect(cfg.DB_DSN)} store at {redact_dsn(cfg.DB_DSN)}")

    boot = bootstrap_admin_if_needed(cfg)
    if boot:
        _debug(f"Bootstrapped initial admin user: username={boot['username']} role={boot['role']}")

    return app

"""
FastAPI REST API Module

Provides REST API endpoints for users, accounts, entries and transfers.
Runs on port 8080 by default.

Endpoints are plain ``def`` functions so FastAPI runs them on its worker
thread pool; the storage backends block and hold per-thread transactions.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import threading
import time
import uuid

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from . import __version__
from .config import SimpleBankConfig, get_config
from .storage import StorageInterface, create_storage
from .users import UserStore
from .accounts import AccountStore
from .entries import EntryStore
from .transfers import TransferStore
from .transfer_engine import TransferEngine
from .currency import parse_currency
from .errors import BankError, CurrencyMismatchError, error_status
from .logging_config import setup_logging, get_logger, log_action


logger = get_logger("simple_bank.api")

settings = get_config()


# Pydantic models for API requests
class CreateUserRequest(BaseModel):
    username: str = Field(..., description="3-32 letters, digits or underscores")
    full_name: str
    email: str


class CreateAccountRequest(BaseModel):
    owner: str = Field(..., description="Username of the account owner")
    currency: str = Field(..., description="Currency code (USD, EUR, CAD)")
    balance: int = Field(0, ge=0, description="Opening balance in minor units")


class CreateTransferRequest(BaseModel):
    from_account_id: int = Field(..., ge=1)
    to_account_id: int = Field(..., ge=1)
    amount: int = Field(..., gt=0, description="Amount in minor units")
    currency: str = Field(..., description="Currency both accounts must hold")


# Banking System Context
class BankingSystem:
    """Stores and transfer engine wired to one storage backend"""

    def __init__(self, storage: Optional[StorageInterface] = None, settings: Optional[SimpleBankConfig] = None):
        self.settings = settings or get_config()

        if storage is None:
            storage = create_storage(
                self.settings.database_url,
                lock_timeout=self.settings.lock_timeout_seconds,
                pool_size=self.settings.database_pool_size,
                migrate=self.settings.auto_migrate
            )
        self.storage = storage

        self.users = UserStore(self.storage)
        self.accounts = AccountStore(self.storage, self.settings.currency_codes)
        self.entries = EntryStore(self.storage)
        self.transfers = TransferStore(self.storage)
        self.engine = TransferEngine(
            self.storage, self.accounts, self.entries, self.transfers,
            allow_overdraft=self.settings.allow_overdraft
        )

    def close(self) -> None:
        self.storage.close()


# Global banking system instance, created on first use
banking_system: Optional[BankingSystem] = None
_banking_system_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close storage connections on shutdown"""
    yield
    if banking_system is not None:
        banking_system.close()


# Create FastAPI app
app = FastAPI(
    title="Simple Bank API",
    description="Ledger-style banking API with atomic, deadlock-free transfers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogger:
    """Tags each request with a correlation id and logs its outcome"""

    header = "X-Correlation-ID"

    async def __call__(self, request: Request, call_next):
        correlation_id = request.headers.get(self.header) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        started = time.perf_counter()

        response = await call_next(request)

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        log_action(
            logger, "info", f"{request.method} {request.url.path} -> {response.status_code}",
            action="http_request", correlation_id=correlation_id,
            extra={"status": response.status_code, "duration_ms": duration_ms}
        )
        response.headers[self.header] = correlation_id
        return response


app.middleware("http")(RequestLogger())


@app.exception_handler(BankError)
async def bank_error_handler(request: Request, exc: BankError):
    """Map ledger errors to their HTTP status with a uniform body"""
    status_code = error_status(exc)
    if status_code >= 500:
        log_action(
            logger, "error", f"{request.method} {request.url.path} failed: {exc.message}",
            action="http_error", correlation_id=getattr(request.state, "correlation_id", None),
            extra={"kind": exc.kind}
        )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "kind": exc.kind}
    )


# Dependency to get banking system
def get_banking_system() -> BankingSystem:
    global banking_system
    if banking_system is None:
        with _banking_system_lock:
            if banking_system is None:
                banking_system = BankingSystem()
    return banking_system


class Page:
    """Pagination query parameters: page_id >= 1, bounded page_size"""

    def __init__(
        self,
        page_id: int = Query(1, ge=1),
        page_size: int = Query(settings.min_page_size, ge=settings.min_page_size, le=settings.max_page_size)
    ):
        self.page_id = page_id
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page_id - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


# Health check endpoint
@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/")
def get_api_info(system: BankingSystem = Depends(get_banking_system)):
    """Get API information"""
    return {
        "name": "Simple Bank API",
        "version": __version__,
        "storage": system.storage.dialect,
        "supported_currencies": system.settings.currency_codes,
        "allow_overdraft": system.engine.allow_overdraft,
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "users": "/users",
            "accounts": "/accounts",
            "entries": "/entries",
            "transfers": "/transfers",
        },
    }


# User Endpoints
@app.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateUserRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a new user"""
    user = system.users.create(request.username, request.full_name, request.email)
    return user.to_dict()


@app.get("/users/{username}")
def get_user(username: str, system: BankingSystem = Depends(get_banking_system)):
    """Get user by username"""
    return system.users.get_by_username(username).to_dict()


# Account Endpoints
@app.post("/accounts", status_code=status.HTTP_201_CREATED)
def create_account(
    request: CreateAccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Open an account for an existing user"""
    account = system.accounts.create(request.owner, request.balance, request.currency)
    return account.to_dict()


@app.get("/accounts/{account_id}")
def get_account(account_id: int, system: BankingSystem = Depends(get_banking_system)):
    """Get account by id"""
    return system.accounts.get(account_id).to_dict()


@app.get("/accounts")
def list_accounts(
    page: Page = Depends(),
    owner: Optional[str] = Query(None),
    system: BankingSystem = Depends(get_banking_system)
):
    """List accounts one page at a time"""
    accounts = system.accounts.list(offset=page.offset, limit=page.limit, owner=owner)
    return [account.to_dict() for account in accounts]


# Entry Endpoints
@app.get("/entries/{entry_id}")
def get_entry(entry_id: int, system: BankingSystem = Depends(get_banking_system)):
    """Get entry by id"""
    return system.entries.get(entry_id).to_dict()


@app.get("/entries")
def list_entries(
    account_id: int = Query(..., ge=1),
    page: Page = Depends(),
    system: BankingSystem = Depends(get_banking_system)
):
    """List an account's entries one page at a time"""
    system.accounts.get(account_id)
    entries = system.entries.list(account_id, offset=page.offset, limit=page.limit)
    return [entry.to_dict() for entry in entries]


# Transfer Endpoints
@app.post("/transfers")
def create_transfer(
    request: CreateTransferRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """
    Transfer funds between two accounts holding the requested currency
    """
    currency = parse_currency(request.currency, system.settings.currency_codes).code

    for account_id in (request.from_account_id, request.to_account_id):
        account = system.accounts.get(account_id)
        if account.currency != currency:
            raise CurrencyMismatchError(currency, account.currency, account_id)

    result = system.engine.transfer(request.from_account_id, request.to_account_id, request.amount)
    return result.to_dict()


@app.get("/transfers/{transfer_id}")
def get_transfer(transfer_id: int, system: BankingSystem = Depends(get_banking_system)):
    """Get transfer by id"""
    return system.transfers.get(transfer_id).to_dict()


@app.get("/transfers")
def list_transfers(
    from_account_id: int = Query(..., ge=1),
    to_account_id: int = Query(..., ge=1),
    page: Page = Depends(),
    system: BankingSystem = Depends(get_banking_system)
):
    """List transfers leaving from_account_id or arriving at to_account_id"""
    transfers = system.transfers.list(
        from_account_id, to_account_id, offset=page.offset, limit=page.limit
    )
    return [transfer.to_dict() for transfer in transfers]


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the API server"""
    setup_logging(
        level="DEBUG" if debug else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file
    )
    uvicorn.run(
        "simple_bank.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=debug,
        log_level="debug" if debug else "info"
    )


if __name__ == "__main__":
    run_server(debug=True)

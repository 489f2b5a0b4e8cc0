import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from pydantic import BaseModel
from sqlalchemy.orm import sessionmaker

from api.dependencies import get_balance_repository, get_transaction_repository
from config import config
from db.db import create_db_engine
from db.models import Base
from db.repositories import BalanceRepository, TransactionRepository
from domain.ledger import (
    AccountName,
    Amount,
    Transaction,
    TransactionId,
    TransactionValidationError,
    validate_transaction,
)
from utils.formatting import format_exact, round_to_unit

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = config()
    engine = create_db_engine(settings.db_file, echo=settings.echo_sql)
    Base.metadata.create_all(engine)
    fastapi_app.state.sessionmaker = sessionmaker(engine)
    yield
    engine.dispose()


app = FastAPI(lifespan=lifespan)


class BalanceView(BaseModel):
    account: str
    balance: str
    rounded: int


class TransactionInput(BaseModel):
    when: datetime
    what: str
    credits: dict[AccountName, Amount] = {}
    debits: dict[AccountName, Amount] = {}


@app.middleware("http")
async def log_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    start_time = perf_counter()
    response = await call_next(request)
    process_time = perf_counter() - start_time
    logger.info("Request time: %s %s: %.4fs", request.method, request.url, process_time)
    return response


@app.get("/balances")
def get_balances(br: Annotated[BalanceRepository, Depends(get_balance_repository)]) -> list[BalanceView]:
    return [
        BalanceView(account=entry.account, balance=format_exact(entry.balance), rounded=round_to_unit(entry.balance))
        for entry in br.balances()
    ]


@app.get("/transactions")
def get_transactions(
    tr: Annotated[TransactionRepository, Depends(get_transaction_repository)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[Transaction]:
    return tr.latest(limit or config().overview_limit)


@app.get("/transactions/{tx_id}")
def get_transaction(
    tx_id: int, tr: Annotated[TransactionRepository, Depends(get_transaction_repository)]
) -> Transaction:
    transaction = tr.get(tx_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail=f"transaction {tx_id} not found")
    return transaction


@app.put("/transactions/{tx_id}")
def put_transaction(
    tx_id: int,
    body: TransactionInput,
    tr: Annotated[TransactionRepository, Depends(get_transaction_repository)],
) -> Transaction:
    transaction = Transaction(
        id=TransactionId(tx_id),
        tx_time=body.when,
        rev_time=datetime.now(timezone.utc),
        description=body.what,
        credits=body.credits,
        debits=body.debits,
    )
    try:
        validate_transaction(transaction)
    except TransactionValidationError as exc:
        raise HTTPException(status_code=400, detail={"reason": exc.reason.value, "message": str(exc)}) from exc
    return tr.replace(TransactionId(tx_id), transaction)

from typing import Annotated, Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from db.repositories import BalanceRepository, TransactionRepository


def get_session(request: Request) -> Generator[Session, None, None]:
    with request.app.state.sessionmaker() as session:
        yield session


def get_transaction_repository(session: Annotated[Session, Depends(get_session)]) -> TransactionRepository:
    return TransactionRepository(session)


def get_balance_repository(session: Annotated[Session, Depends(get_session)]) -> BalanceRepository:
    return BalanceRepository(session)

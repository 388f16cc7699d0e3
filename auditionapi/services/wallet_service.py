"""
Balance-and-ledger service.

Every paid or rewarded action goes through these primitives:

- ``check_balance``: is the stored balance at least ``cost``?
- ``debit`` / ``credit``: single conditional UPDATE statements evaluated by
  the database, so two concurrent debits can never overspend.
- ``append_ledger_entry``: immutable audit row for every balance change.
- ``spawn_job``: pending job record for the external render worker.

Callers compose them inside ``transaction()`` so that check, job creation,
debit and ledger append are applied all together or not at all.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from auditionapi.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from auditionapi.models.generated_image import JobKind, JobStatus
from auditionapi.repositories.job_repository import JobRepository
from auditionapi.repositories.ledger_repository import LedgerRepository
from auditionapi.repositories.user_repository import UserRepository
from auditionapi.schemas.wallet import LedgerEntry, LedgerIntegrityResponse

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class WalletService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.ledger_repo = LedgerRepository(db)
        self.job_repo = JobRepository(db)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Unit of work: commit on success, roll back on any exception."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Unit of work rolled back: {e}")
            raise StorageError(f"Database error: {e.__class__.__name__}") from e
        except Exception:
            self.db.rollback()
            raise

    def get_balance(self, user_id: str) -> int:
        balance = self.user_repo.get_balance(user_id)
        if balance is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return balance

    def check_balance(self, user_id: str, cost: int) -> bool:
        return self.get_balance(user_id) >= cost

    def debit(self, user_id: str, amount: int) -> int:
        """Remove ``amount`` diamonds and return the new balance.

        Raises:
            ValidationError: amount is not positive
            InsufficientBalanceError: balance < amount (nothing is changed)
            NotFoundError: no such user
        """
        if amount <= 0:
            raise ValidationError("Debit amount must be positive")

        if not self.user_repo.debit_if_sufficient(user_id, amount):
            balance = self.get_balance(user_id)
            raise InsufficientBalanceError(
                "Insufficient diamonds",
                details={"required": amount, "available": balance},
            )

        new_balance = self.get_balance(user_id)
        logger.info(f"Debited {amount} diamonds from {user_id}, balance {new_balance}")
        return new_balance

    def credit(self, user_id: str, amount: int) -> int:
        if amount <= 0:
            raise ValidationError("Credit amount must be positive")

        if not self.user_repo.increment(user_id, diamonds=amount):
            raise NotFoundError("User not found", details={"user_id": user_id})

        new_balance = self.get_balance(user_id)
        logger.info(f"Credited {amount} diamonds to {user_id}, balance {new_balance}")
        return new_balance

    def append_ledger_entry(
        self, user_id: str, amount: int, reason_code: str, description: str = ""
    ) -> LedgerEntry:
        try:
            return self.ledger_repo.append(
                user_id=user_id,
                amount=amount,
                transaction_type=str(reason_code),
                description=description,
            )
        except SQLAlchemyError as e:
            logger.error(f"Ledger append failed for {user_id} ({reason_code}): {e}")
            raise StorageError("Failed to write ledger entry") from e

    def spawn_job(
        self,
        job_id: str,
        user_id: str,
        kind: JobKind,
        payload: Dict[str, Any],
        cost: int = 0,
    ) -> str:
        """Create a pending job; an existing ``job_id`` is a conflict."""
        if not job_id:
            raise ValidationError("Missing jobId")

        if self.job_repo.exists(job_id):
            raise ConflictError("Job already exists", details={"job_id": job_id})

        try:
            job = self.job_repo.insert(
                job_id=job_id,
                user_id=user_id,
                kind=kind.value,
                payload=payload,
                cost=cost,
                status=JobStatus.PENDING,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent request carrying the same id
            raise ConflictError("Job already exists", details={"job_id": job_id}) from e
        return job.id

    def charge(
        self, user_id: str, amount: int, reason_code: str, description: str = ""
    ) -> int:
        """debit + ledger entry with ``-amount``"""
        new_balance = self.debit(user_id, amount)
        self.append_ledger_entry(user_id, -amount, reason_code, description)
        return new_balance

    def reward(
        self, user_id: str, amount: int, reason_code: str, description: str = ""
    ) -> int:
        new_balance = self.credit(user_id, amount)
        self.append_ledger_entry(user_id, amount, reason_code, description)
        return new_balance

    def get_history(self, user_id: str, limit: int = HISTORY_LIMIT) -> List[LedgerEntry]:
        return self.ledger_repo.latest(user_id, limit=limit)

    def verify_integrity(self, user_id: str) -> LedgerIntegrityResponse:
        """Compare the sum of ledger amounts with the stored balance.

        A mismatch is reported, not corrected: accounts that predate the
        ledger or received signup diamonds will legitimately differ.
        """
        balance = self.get_balance(user_id)
        ledger_sum, entry_count = self.ledger_repo.sum_for_user(user_id)
        difference = balance - ledger_sum
        if difference:
            logger.warning(
                f"Ledger mismatch for {user_id}: balance={balance} ledger={ledger_sum}"
            )
        return LedgerIntegrityResponse(
            user_id=user_id,
            balance=balance,
            ledger_sum=ledger_sum,
            entry_count=entry_count,
            difference=difference,
            status="OK" if difference == 0 else "MISMATCH",
        )

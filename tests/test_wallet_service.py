import pytest
from sqlalchemy import select

from auditionapi.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from auditionapi.models import DiamondTransactionLog, GeneratedImage, JobKind
from auditionapi.services.wallet_service import WalletService

from conftest import get_user


def ledger_rows(db_session, user_id):
    db_session.expire_all()
    stmt = select(DiamondTransactionLog).where(DiamondTransactionLog.user_id == user_id)
    return list(db_session.execute(stmt).scalars())


class TestBalance:
    def test_check_balance(self, db_session, make_user):
        user_id = make_user(diamonds=5)
        wallet = WalletService(db_session)

        assert wallet.check_balance(user_id, 5) is True
        assert wallet.check_balance(user_id, 6) is False

    def test_check_balance_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            WalletService(db_session).check_balance("missing", 1)


class TestDebitCredit:
    def test_charge_decrements_and_appends_one_entry(self, db_session, make_user):
        user_id = make_user(diamonds=10)
        wallet = WalletService(db_session)

        with wallet.transaction():
            new_balance = wallet.charge(user_id, 3, "SHARE_IMAGE", "test")

        assert new_balance == 7
        assert get_user(db_session, user_id).diamonds == 7
        rows = ledger_rows(db_session, user_id)
        assert [(r.amount, r.transaction_type) for r in rows] == [(-3, "SHARE_IMAGE")]

    def test_debit_insufficient_leaves_balance(self, db_session, make_user):
        user_id = make_user(diamonds=2)
        wallet = WalletService(db_session)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            with wallet.transaction():
                wallet.charge(user_id, 3, "SHARE_IMAGE")

        assert exc_info.value.status_code == 402
        assert get_user(db_session, user_id).diamonds == 2
        assert ledger_rows(db_session, user_id) == []

    def test_debit_rejects_non_positive_amount(self, db_session, make_user):
        user_id = make_user(diamonds=2)
        with pytest.raises(ValidationError):
            WalletService(db_session).debit(user_id, 0)

    def test_debit_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            WalletService(db_session).debit("missing", 1)

    def test_credit(self, db_session, make_user):
        user_id = make_user(diamonds=1)
        wallet = WalletService(db_session)

        with wallet.transaction():
            assert wallet.reward(user_id, 4, "REFUND", "refund") == 5

        assert get_user(db_session, user_id).diamonds == 5
        assert ledger_rows(db_session, user_id)[0].amount == 4

    def test_credit_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            WalletService(db_session).credit("missing", 1)


class TestUnitOfWork:
    def test_failure_rolls_back_job_and_debit(self, db_session, make_user):
        user_id = make_user(diamonds=1)
        wallet = WalletService(db_session)

        with pytest.raises(InsufficientBalanceError):
            with wallet.transaction():
                wallet.spawn_job("job-1", user_id, JobKind.GROUP, {"x": 1}, cost=2)
                wallet.charge(user_id, 2, "GROUP_IMAGE")

        db_session.expire_all()
        assert db_session.get(GeneratedImage, "job-1") is None
        assert get_user(db_session, user_id).diamonds == 1
        assert ledger_rows(db_session, user_id) == []

    def test_spawn_job_twice_conflicts(self, db_session, make_user):
        user_id = make_user(diamonds=10)
        wallet = WalletService(db_session)

        with wallet.transaction():
            wallet.spawn_job("job-1", user_id, JobKind.SINGLE, {})
        with pytest.raises(ConflictError):
            with wallet.transaction():
                wallet.spawn_job("job-1", user_id, JobKind.SINGLE, {})

        job = db_session.get(GeneratedImage, "job-1")
        assert job.status == "pending"
        assert job.image_url == "PENDING"


class TestHistoryAndIntegrity:
    def test_history_newest_first(self, db_session, make_user):
        user_id = make_user(diamonds=0)
        wallet = WalletService(db_session)
        with wallet.transaction():
            wallet.reward(user_id, 5, "DAILY_CHECK_IN")
            wallet.charge(user_id, 1, "SHARE_IMAGE")

        history = wallet.get_history(user_id)
        assert [entry.amount for entry in history] == [-1, 5]

    def test_integrity_reports_mismatch(self, db_session, make_user):
        user_id = make_user(diamonds=10)
        wallet = WalletService(db_session)
        with wallet.transaction():
            wallet.charge(user_id, 4, "SHARE_IMAGE")

        report = wallet.verify_integrity(user_id)
        assert report.balance == 6
        assert report.ledger_sum == -4
        assert report.status == "MISMATCH"
        assert report.difference == 10

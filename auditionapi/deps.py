from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.containers import Container
from auditionapi.database.session import get_db

# Services
from auditionapi.services.admin_service import AdminService
from auditionapi.services.check_in_service import CheckInService
from auditionapi.services.identity_admin_client import IdentityAdminClient
from auditionapi.services.job_service import JobService
from auditionapi.services.payment_service import PaymentService
from auditionapi.services.payos_client import PayOSClient
from auditionapi.services.referral_service import ReferralService
from auditionapi.services.share_service import ShareService
from auditionapi.services.storage_service import StorageService
from auditionapi.services.wallet_service import WalletService


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService(db=db)


@inject
def get_check_in_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
) -> CheckInService:
    return CheckInService(db=db, settings=settings)


@inject
def get_referral_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
) -> ReferralService:
    return ReferralService(db=db, settings=settings)


@inject
def get_share_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
) -> ShareService:
    return ShareService(db=db, settings=settings)


@inject
def get_job_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
    storage: StorageService = Depends(Provide[Container.storage_service]),
) -> JobService:
    return JobService(db=db, settings=settings, storage=storage)


@inject
def get_admin_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
    identity_admin: IdentityAdminClient = Depends(Provide[Container.identity_admin]),
) -> AdminService:
    return AdminService(db=db, settings=settings, identity_admin=identity_admin)


@inject
def get_payment_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(Provide[Container.config]),
    payos: PayOSClient = Depends(Provide[Container.payos_client]),
) -> PaymentService:
    return PaymentService(db=db, settings=settings, payos=payos)

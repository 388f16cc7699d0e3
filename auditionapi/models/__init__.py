from auditionapi.models.base import Base
from auditionapi.models.user import User
from auditionapi.models.ledger import DiamondTransactionLog, TransactionType
from auditionapi.models.generated_image import GeneratedImage, JobKind, JobStatus
from auditionapi.models.check_in import CheckInReward, DailyCheckIn
from auditionapi.models.payment import CreditPackage, PaymentStatus, PaymentTransaction

__all__ = [
    "Base",
    "User",
    "DiamondTransactionLog",
    "TransactionType",
    "GeneratedImage",
    "JobKind",
    "JobStatus",
    "CheckInReward",
    "DailyCheckIn",
    "CreditPackage",
    "PaymentStatus",
    "PaymentTransaction",
]

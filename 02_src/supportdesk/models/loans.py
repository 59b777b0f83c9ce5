"""Loan application and agent template models."""

from dataclasses import dataclass, field
from enum import Enum


class LoanType(str, Enum):
    """Loan products."""

    BUSINESS = "Business"
    PERSONAL = "Personal"
    MSME = "MSME"


class LoanStatus(str, Enum):
    """Processing status of a loan application."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISBURSED = "disbursed"


@dataclass
class LoanApplication:
    """A customer's loan application."""

    id: str
    customer_id: str
    type: LoanType
    amount: int
    status: LoanStatus
    applied_date: str  # YYYY-MM-DD
    last_updated: str  # YYYY-MM-DD
    documents: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QuickReply:
    """Canned reply text offered to agents."""

    id: str
    title: str
    content: str
    category: str

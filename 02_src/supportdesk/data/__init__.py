"""Mock data module."""

from .mock_data import (
    AGENT_CREDENTIALS,
    CUSTOMER_CREDENTIALS,
    MOCK_AGENTS,
    MOCK_CUSTOMERS,
    MOCK_QUICK_REPLIES,
    default_loan_applications,
    get_agent_by_id,
    get_agent_by_username,
    get_customer_by_id,
    get_customer_by_phone,
    get_customer_by_username,
    quick_replies,
    quick_reply_categories,
    verify_agent_credentials,
    verify_customer_credentials,
)

__all__ = [
    "AGENT_CREDENTIALS",
    "CUSTOMER_CREDENTIALS",
    "MOCK_AGENTS",
    "MOCK_CUSTOMERS",
    "MOCK_QUICK_REPLIES",
    "default_loan_applications",
    "get_agent_by_id",
    "get_agent_by_username",
    "get_customer_by_id",
    "get_customer_by_phone",
    "get_customer_by_username",
    "quick_replies",
    "quick_reply_categories",
    "verify_agent_credentials",
    "verify_customer_credentials",
]

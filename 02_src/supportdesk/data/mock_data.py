"""Mock customers, agents, credentials, loan applications and quick replies."""

from ..models import (
    Agent,
    AgentStatus,
    Customer,
    LoanApplication,
    LoanStatus,
    LoanType,
    QuickReply,
)

MOCK_CUSTOMERS: list[Customer] = [
    Customer(
        id="cust-1",
        name="Rahul Sharma",
        phone="+919876543210",
        username="rahul.sharma",
        email="rahul.sharma@example.com",
    ),
    Customer(
        id="cust-2",
        name="Priya Patel",
        phone="+919876543211",
        username="priya.patel",
        email="priya.patel@example.com",
    ),
]

# username -> password
CUSTOMER_CREDENTIALS: dict[str, str] = {
    "rahul.sharma": "password123",
    "priya.patel": "password123",
}

MOCK_AGENTS: list[Agent] = [
    Agent(
        id="agent-1",
        name="Amit Kumar",
        username="amit.kumar",
        email="amit.kumar@krux.com",
        status=AgentStatus.ONLINE,
    ),
    Agent(
        id="agent-2",
        name="Sneha Singh",
        username="sneha.singh",
        email="sneha.singh@krux.com",
        status=AgentStatus.ONLINE,
    ),
]

# username -> password
AGENT_CREDENTIALS: dict[str, str] = {
    "amit.kumar": "password123",
    "sneha.singh": "password123",
}


def default_loan_applications() -> list[LoanApplication]:
    """Fresh copy of the seeded loan applications."""
    return [
        LoanApplication(
            id="LA-2024-001",
            customer_id="cust-1",
            type=LoanType.BUSINESS,
            amount=500000,
            status=LoanStatus.UNDER_REVIEW,
            applied_date="2024-10-15",
            last_updated="2024-10-28",
            documents=["PAN Card", "Aadhaar Card", "Business Registration"],
        ),
        LoanApplication(
            id="LA-2024-002",
            customer_id="cust-2",
            type=LoanType.PERSONAL,
            amount=200000,
            status=LoanStatus.APPROVED,
            applied_date="2024-10-10",
            last_updated="2024-10-25",
            documents=["PAN Card", "Aadhaar Card", "Salary Slips"],
        ),
    ]


MOCK_QUICK_REPLIES: list[QuickReply] = [
    QuickReply(
        id="qr-1",
        title="Welcome Message",
        content="Hello! Welcome to KRUX Finance. How may I assist you today?",
        category="greeting",
    ),
    QuickReply(
        id="qr-2",
        title="Document List - Business Loan",
        content=(
            "For a Business Loan, you need: 1) PAN Card 2) Aadhaar Card "
            "3) Business Registration Certificate 4) Last 6 months bank statements "
            "5) ITR for last 2 years"
        ),
        category="documents",
    ),
    QuickReply(
        id="qr-3",
        title="Document List - Personal Loan",
        content=(
            "For a Personal Loan, you need: 1) PAN Card 2) Aadhaar Card "
            "3) Last 3 months salary slips 4) Bank statements for last 6 months"
        ),
        category="documents",
    ),
    QuickReply(
        id="qr-4",
        title="Application Status Query",
        content="Let me check your application status. Could you please provide your Application ID?",
        category="status",
    ),
    QuickReply(
        id="qr-5",
        title="Transfer to Senior Agent",
        content="I understand your concern. Let me transfer you to a senior agent who can better assist you.",
        category="escalation",
    ),
    QuickReply(
        id="qr-6",
        title="Closing Message",
        content="Thank you for contacting KRUX Finance. Is there anything else I can help you with today?",
        category="closing",
    ),
]


def get_customer_by_phone(phone: str) -> Customer | None:
    return next((c for c in MOCK_CUSTOMERS if c.phone == phone), None)


def get_customer_by_username(username: str) -> Customer | None:
    return next((c for c in MOCK_CUSTOMERS if c.username == username), None)


def get_customer_by_id(customer_id: str) -> Customer | None:
    return next((c for c in MOCK_CUSTOMERS if c.id == customer_id), None)


def get_agent_by_username(username: str) -> Agent | None:
    return next((a for a in MOCK_AGENTS if a.username == username), None)


def get_agent_by_id(agent_id: str) -> Agent | None:
    return next((a for a in MOCK_AGENTS if a.id == agent_id), None)


def verify_customer_credentials(username: str, password: str) -> Customer | None:
    """Return the customer if username and password match."""
    customer = get_customer_by_username(username)
    if customer and CUSTOMER_CREDENTIALS.get(username) == password:
        return customer
    return None


def verify_agent_credentials(username: str, password: str) -> Agent | None:
    """Return the agent if username and password match."""
    agent = get_agent_by_username(username)
    if agent and AGENT_CREDENTIALS.get(username) == password:
        return agent
    return None


def quick_replies(category: str | None = None) -> list[QuickReply]:
    """Quick replies, optionally restricted to one category ("all" means any)."""
    if not category or category == "all":
        return list(MOCK_QUICK_REPLIES)
    return [qr for qr in MOCK_QUICK_REPLIES if qr.category == category]


def quick_reply_categories() -> list[str]:
    """Categories in first-seen order, prefixed with "all"."""
    categories = ["all"]
    for qr in MOCK_QUICK_REPLIES:
        if qr.category not in categories:
            categories.append(qr.category)
    return categories

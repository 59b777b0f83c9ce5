"""Scripted loan-support dialogue.

Every function here is pure with respect to the loan application lookup
given to the engine: the same flow or selection always yields the same
response, and nothing raises. Unknown flows, unknown selections and unknown
application IDs all degrade to a default response.
"""

from collections.abc import Callable, Iterable
from typing import Protocol

from ..models import BotOption, BotResponse, Flow, LoanApplication, LoanStatus

LoanLookup = Callable[[str], LoanApplication | None]

AGENT_VALUE = "agent"
MAIN_MENU_VALUE = "main_menu"
PROCEED_PREFIX = "proceed_"

STATUS_MESSAGES: dict[LoanStatus, str] = {
    LoanStatus.PENDING: (
        "Your application is pending review. "
        "Our team will review it within 1-2 business days."
    ),
    LoanStatus.UNDER_REVIEW: "Your application is currently under review by our loan committee.",
    LoanStatus.APPROVED: "🎉 Congratulations! Your application has been approved.",
    LoanStatus.REJECTED: "Unfortunately, your application was not approved at this time.",
    LoanStatus.DISBURSED: "✅ Your loan has been disbursed to your account.",
}

_MAIN_OPTIONS = (
    BotOption("opt-1", "💼 Apply for a loan", "apply_loan", Flow.LOAN_APPLICATION),
    BotOption("opt-2", "📄 Document requirements", "documents", Flow.DOCUMENT_REQUIREMENTS),
    BotOption("opt-3", "🔍 Check application status", "status", Flow.STATUS_CHECK),
    BotOption("opt-4", "👤 Speak with an agent", AGENT_VALUE, Flow.ESCALATION),
)

_GENERAL_OPTIONS = (
    BotOption("gen-1", "Loan Application", "apply_loan", Flow.LOAN_APPLICATION),
    BotOption("gen-2", "Document Requirements", "documents", Flow.DOCUMENT_REQUIREMENTS),
    BotOption("gen-3", "Check Status", "status", Flow.STATUS_CHECK),
    BotOption("gen-4", "Talk to Agent", AGENT_VALUE, Flow.ESCALATION),
)

_MAIN_MENU_OPTION = BotOption("menu", "Back to main menu", MAIN_MENU_VALUE, Flow.GREETING)

_FALLBACK_OPTIONS = (
    BotOption("def-1", "Apply for Loan", "apply_loan", Flow.LOAN_APPLICATION),
    BotOption("def-2", "Document Requirements", "documents", Flow.DOCUMENT_REQUIREMENTS),
    BotOption("def-3", "Check Status", "status", Flow.STATUS_CHECK),
)

_FLOW_RESPONSES: dict[Flow, BotResponse] = {
    Flow.GREETING: BotResponse(
        message=(
            "Hello! Welcome to KRUX Finance. I'm here to help you with your loan "
            "application needs. How can I assist you today?"
        ),
        options=_MAIN_OPTIONS,
    ),
    Flow.LOAN_APPLICATION: BotResponse(
        message="Great! I can help you with your loan application. We offer three types of loans:",
        options=(
            BotOption("loan-1", "🏢 Business Loan", "business"),
            BotOption("loan-2", "👤 Personal Loan", "personal"),
            BotOption("loan-3", "🏭 MSME Loan", "msme"),
        ),
    ),
    Flow.DOCUMENT_REQUIREMENTS: BotResponse(
        message=(
            "I can help you understand the document requirements. "
            "Which type of loan are you interested in?"
        ),
        options=(
            BotOption("doc-1", "Business Loan", "business_docs"),
            BotOption("doc-2", "Personal Loan", "personal_docs"),
            BotOption("doc-3", "MSME Loan", "msme_docs"),
        ),
    ),
    Flow.STATUS_CHECK: BotResponse(
        message=(
            "I can help you check your application status. "
            "Please provide your Application ID (e.g., LA-2024-001):"
        ),
        requires_input=True,
        input_type="text",
    ),
    Flow.ESCALATION: BotResponse(
        message=(
            "I understand you'd like to speak with a human agent. Let me connect you "
            "with one of our customer support executives. They'll be with you shortly."
        ),
    ),
    Flow.GENERAL_QUERY: BotResponse(
        message=(
            "I'm here to help! Could you please provide more details about your query, "
            "or choose from one of the main options?"
        ),
        options=_GENERAL_OPTIONS,
    ),
}

_FALLBACK_RESPONSE = BotResponse(
    message="I'm not sure I understand. Let me help you with the main options:",
    options=_FALLBACK_OPTIONS,
)

# (title, checklist, amount, rate, processing time) per loan product
_REQUIREMENTS: dict[str, tuple[str, tuple[str, ...], str, str, str]] = {
    "business": (
        "Business Loan",
        (
            "PAN Card",
            "Aadhaar Card",
            "Business Registration Certificate",
            "Last 6 months bank statements",
            "ITR for last 2 years",
            "Business address proof",
        ),
        "Up to ₹50 lakhs",
        "Starting from 10.5% p.a.",
        "3-5 business days",
    ),
    "personal": (
        "Personal Loan",
        (
            "PAN Card",
            "Aadhaar Card",
            "Last 3 months salary slips",
            "Bank statements for last 6 months",
            "Employment proof",
        ),
        "Up to ₹25 lakhs",
        "Starting from 11.5% p.a.",
        "2-3 business days",
    ),
    "msme": (
        "MSME Loan",
        (
            "PAN Card",
            "Aadhaar Card",
            "MSME Registration Certificate",
            "Last 12 months bank statements",
            "ITR for last 3 years",
            "Business financials",
        ),
        "Up to ₹1 crore",
        "Starting from 9.5% p.a.",
        "5-7 business days",
    ),
}


def format_inr(amount: int) -> str:
    """Group digits the Indian way: 500000 -> 5,00,000."""
    digits = str(abs(int(amount)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"-{digits}" if amount < 0 else digits


def _requirements_response(product: str) -> BotResponse:
    title, checklist, amount, rate, processing = _REQUIREMENTS[product]
    lines = "\n".join(f"✓ {item}" for item in checklist)
    return BotResponse(
        message=(
            f"**{title} Requirements:**\n\n{lines}\n\n"
            f"**Loan Amount:** {amount}\n"
            f"**Interest Rate:** {rate}\n"
            f"**Processing Time:** {processing}\n\n"
            "Would you like to proceed with the application?"
        ),
        options=(
            BotOption("proceed-1", "Yes, proceed", f"{PROCEED_PREFIX}{product}"),
            BotOption("proceed-2", "Talk to agent", AGENT_VALUE, Flow.ESCALATION),
            BotOption("proceed-3", "Back to main menu", MAIN_MENU_VALUE, Flow.GREETING),
        ),
    )


def _proceed_response(product: str) -> BotResponse:
    return BotResponse(
        message=(
            f"Great! To proceed with your {product[:1].upper() + product[1:]} Loan "
            "application, I'll connect you with one of our loan specialists who will "
            "guide you through the process.\n\n"
            "You can also start your application online at our website or visit the "
            "nearest KRUX Finance branch.\n\n"
            "Is there anything else I can help you with?"
        ),
        options=(
            BotOption("final-1", "Talk to specialist", AGENT_VALUE, Flow.ESCALATION),
            BotOption("final-2", "Back to main menu", MAIN_MENU_VALUE, Flow.GREETING),
        ),
    )


class IDialogueEngine(Protocol):
    """Maps dialogue state and input to the bot's response."""

    def respond(self, flow: Flow | str, user_input: str | None = None) -> BotResponse:
        """Bot response for a flow; status_check with input looks the ID up."""
        ...

    def handle_selection(self, value: str) -> BotResponse:
        """Bot response for a selected option without a next flow."""
        ...

    def check_status(self, application_id: str) -> BotResponse:
        """Bot response describing a loan application's status."""
        ...

    def option_for(self, value: str) -> BotOption | None:
        """Menu option carrying `value`, if the script offers one."""
        ...


class DialogueEngine:
    """Loan-support script over a loan application lookup."""

    def __init__(self, lookup: LoanLookup):
        self._lookup = lookup

    @classmethod
    def from_applications(cls, applications: Iterable[LoanApplication]) -> "DialogueEngine":
        """Engine over a fixed collection of applications."""
        by_id = {app.id: app for app in applications}
        return cls(by_id.get)

    def respond(self, flow: Flow | str, user_input: str | None = None) -> BotResponse:
        """Bot response for a flow; status_check with input looks the ID up."""
        try:
            flow = Flow(flow)
        except ValueError:
            return _FALLBACK_RESPONSE

        if flow == Flow.STATUS_CHECK and user_input:
            return self.check_status(user_input)

        return _FLOW_RESPONSES.get(flow, _FALLBACK_RESPONSE)

    def handle_selection(self, value: str) -> BotResponse:
        """Bot response for a selected option value; unknown values get general_query."""
        product = value.removesuffix("_docs")
        if product in _REQUIREMENTS:
            return _requirements_response(product)

        if value.startswith(PROCEED_PREFIX):
            return _proceed_response(value[len(PROCEED_PREFIX):])

        return _FLOW_RESPONSES[Flow.GENERAL_QUERY]

    def option_for(self, value: str) -> BotOption | None:
        """Menu option carrying `value`, for selections made without offered options."""
        for option in _MAIN_OPTIONS:
            if option.value == value:
                return option
        if value == MAIN_MENU_VALUE:
            return _MAIN_MENU_OPTION
        return None

    def check_status(self, application_id: str) -> BotResponse:
        """Describe an application's status, or offer retry/agent/menu if unknown."""
        application = self._lookup(application_id.strip().upper())

        if application is None:
            return BotResponse(
                message=(
                    f'I couldn\'t find an application with ID "{application_id}". '
                    "Please check the Application ID and try again, or contact our "
                    "support team for assistance."
                ),
                options=(
                    BotOption("status-retry", "Try again", "status", Flow.STATUS_CHECK),
                    BotOption("status-agent", "Talk to agent", AGENT_VALUE, Flow.ESCALATION),
                    BotOption("status-menu", "Main menu", MAIN_MENU_VALUE, Flow.GREETING),
                ),
            )

        status_label = application.status.value.replace("_", " ", 1).upper()
        return BotResponse(
            message=(
                f"**Application Status for {application_id}**\n\n"
                f"📋 Loan Type: {application.type.value} Loan\n"
                f"💰 Amount: ₹{format_inr(application.amount)}\n"
                f"📅 Applied: {application.applied_date}\n"
                f"🔄 Status: {status_label}\n\n"
                f"{STATUS_MESSAGES[application.status]}\n\n"
                f"Last Updated: {application.last_updated}"
            ),
            options=(
                BotOption("status-details", "Talk to agent for details", AGENT_VALUE, Flow.ESCALATION),
                BotOption("status-menu", "Back to main menu", MAIN_MENU_VALUE, Flow.GREETING),
            ),
        )

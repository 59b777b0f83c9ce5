"""Domain exceptions raised by the support desk."""


class SupportDeskError(Exception):
    """Base class for support desk errors."""


class ConversationNotFoundError(SupportDeskError, LookupError):
    """No conversation with the given ID exists."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id


class InvalidTransitionError(SupportDeskError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, conversation_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move conversation {conversation_id} from {current} to {target}"
        )
        self.conversation_id = conversation_id
        self.current = current
        self.target = target


class ActiveTicketConflictError(SupportDeskError):
    """The customer already has another active ticket."""

    def __init__(self, customer_id: str, active_conversation_id: str):
        super().__init__(
            f"Customer {customer_id} already has active ticket {active_conversation_id}"
        )
        self.customer_id = customer_id
        self.active_conversation_id = active_conversation_id


class InvalidRatingError(SupportDeskError, ValueError):
    """Rating is out of range or not allowed for this conversation."""


class AuthenticationError(SupportDeskError):
    """No principal is signed in."""


class ConversationClosedError(SupportDeskError):
    """The conversation is resolved and no longer accepts agent replies."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} is resolved")
        self.conversation_id = conversation_id

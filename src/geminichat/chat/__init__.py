from .controller import ConversationController
from .models import TurnResult

__all__ = ["ConversationController", "TurnResult"]

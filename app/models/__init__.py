from app.models.assistant import ScheduleRequest
from app.models.oauth import Identity, Tokens
from app.models.user import User

__all__ = ["User", "Tokens", "Identity", "ScheduleRequest"]

from .profile import router as profile_router
from .resume import router as resume_router
from .approval import router as approval_router
from .mis import router as mis_router

__all__ = ["profile_router", "resume_router", "approval_router", "mis_router"]

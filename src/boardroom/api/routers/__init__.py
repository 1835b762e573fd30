from .health import router as health_router
from .items import build_item_router
from .profiles import router as profiles_router
from .voting import router as voting_router

__all__ = ["health_router", "build_item_router", "profiles_router", "voting_router"]

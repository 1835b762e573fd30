# src/boardroom/db/__init__.py
# Don't import session on package import; expose lazily instead
from .base import Base  # safe to import

def get_sessionmaker():
    from .session import get_sessionmaker as _gsm
    return _gsm()

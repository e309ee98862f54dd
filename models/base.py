from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class TickStatus(str, enum.Enum):
    """Outcome of a single sync tick"""
    NOOP = "noop"
    SKIPPED = "skipped"
    SUCCESS = "success"
    PARTIAL = "partial_success"


class TickState(str, enum.Enum):
    """Phases a tick moves through"""
    IDLE = "idle"
    FETCHING = "fetching"
    WRITING = "writing"
    COMMITTING = "committing"

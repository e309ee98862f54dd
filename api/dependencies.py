"""
Shared FastAPI dependencies
"""

from sync_job.runner import SyncRunner
from sync_job.scheduler import SyncScheduler

# Single scheduler/runner pair for the process; ticks from the interval job
# and from the API go through the same runner and are serialized by it.
scheduler = SyncScheduler()


def get_runner() -> SyncRunner:
    """Runner used by the API routes"""
    return scheduler.runner

"""
Shared FastAPI dependencies
"""
from functools import lru_cache
from typing import TYPE_CHECKING

from ..config import settings

if TYPE_CHECKING:
    from ..proctor.storage import ReportStore


@lru_cache(maxsize=1)
def get_report_store() -> "ReportStore":
    """Report store rooted at settings.REPORTS_DIR (created on first use)"""
    from ..proctor.storage import ReportStore

    return ReportStore(settings.REPORTS_DIR)

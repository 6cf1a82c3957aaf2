# This package contains the progress and certificate business logic.

from . import completion_evaluator
from . import certificate_issuer
from . import progress_tracker
from . import reconciliation

__all__ = [
    "completion_evaluator",
    "certificate_issuer",
    "progress_tracker",
    "reconciliation",
]

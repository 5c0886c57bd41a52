"""
costbook_modules.project
========================

Read models and classification for the collaborator tables (projects,
progress records, cost entries, subscription billings).  The engine reads
these tables; it never writes them.
"""

from costbook_modules.project.classification import (
    DEFAULT_RULES,
    ClassificationRules,
    classify_project,
)
from costbook_modules.project.models import (
    CostEntry,
    ProgressRecord,
    ProjectKind,
    ProjectRecord,
    SubscriptionBilling,
)
from costbook_modules.project.selectors import ProjectSelector

__all__ = [
    "ClassificationRules",
    "CostEntry",
    "DEFAULT_RULES",
    "ProgressRecord",
    "ProjectKind",
    "ProjectRecord",
    "ProjectSelector",
    "SubscriptionBilling",
    "classify_project",
]

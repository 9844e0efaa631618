"""
Aircraft maintenance status derived from reported issues.

An aircraft is grounded while any unresolved issue of severity
'grounding' is on file for it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from maintenance.models import Issue, SEVERITY_GROUNDING, STATUS_RESOLVED


@dataclass
class MaintenanceStatus:
    """Open-issue summary for an aircraft."""
    grounded: bool = False
    open_issue_count: int = 0
    grounding_issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'grounded': self.grounded,
            'open_issue_count': self.open_issue_count,
            'grounding_issues': list(self.grounding_issues),
        }


def unresolved_issues(aircraft):
    return Issue.objects.filter(aircraft=aircraft).exclude(status=STATUS_RESOLVED)


def calculate_maintenance_status(aircraft) -> MaintenanceStatus:
    issues = list(unresolved_issues(aircraft).only('id', 'severity'))
    grounding = [str(issue.id) for issue in issues if issue.severity == SEVERITY_GROUNDING]
    return MaintenanceStatus(
        grounded=bool(grounding),
        open_issue_count=len(issues),
        grounding_issues=grounding,
    )

"""
IAM collector.

Users, roles, groups and customer-managed policies, plus any IAM Access
Analyzer analyzers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import Collector, as_dicts, as_list, run_aws, run_aws_optional, text_or_unknown

POLICY_LIMIT = 50


@dataclass
class IamUser:
    user_name: str
    create_date: str
    password_last_used: str
    tags: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class IamRole:
    role_name: str
    create_date: str
    max_session_duration: Optional[int]
    assume_role_policy_document: Any = None


@dataclass
class IamGroup:
    group_name: str
    create_date: str


@dataclass
class IamPolicy:
    policy_name: str
    create_date: str
    attachment_count: Optional[int]
    is_attachable: Optional[bool]


@dataclass
class IamSummary:
    users: List[IamUser] = field(default_factory=list)
    roles: List[IamRole] = field(default_factory=list)
    groups: List[IamGroup] = field(default_factory=list)
    policies: List[IamPolicy] = field(default_factory=list)
    access_analyzer: Dict[str, Any] = field(default_factory=dict)


def project_iam(users: Dict[str, Any], roles: Dict[str, Any], groups: Dict[str, Any],
                policies: Dict[str, Any], analyzers: Dict[str, Any]) -> IamSummary:
    return IamSummary(
        users=[
            IamUser(
                user_name=text_or_unknown(u.get("UserName")),
                create_date=text_or_unknown(u.get("CreateDate")),
                password_last_used=text_or_unknown(u.get("PasswordLastUsed")),
                tags=as_list(u.get("Tags"))
            )
            for u in as_dicts(users.get("Users"))
        ],
        roles=[
            IamRole(
                role_name=text_or_unknown(r.get("RoleName")),
                create_date=text_or_unknown(r.get("CreateDate")),
                max_session_duration=r.get("MaxSessionDuration"),
                assume_role_policy_document=r.get("AssumeRolePolicyDocument")
            )
            for r in as_dicts(roles.get("Roles"))
        ],
        groups=[
            IamGroup(
                group_name=text_or_unknown(g.get("GroupName")),
                create_date=text_or_unknown(g.get("CreateDate"))
            )
            for g in as_dicts(groups.get("Groups"))
        ],
        policies=[
            IamPolicy(
                policy_name=text_or_unknown(p.get("PolicyName")),
                create_date=text_or_unknown(p.get("CreateDate")),
                attachment_count=p.get("AttachmentCount"),
                is_attachable=p.get("IsAttachable")
            )
            for p in as_dicts(policies.get("Policies"))
        ],
        access_analyzer=analyzers
    )


class IamCollector(Collector):
    """IAM entities and Access Analyzer status."""

    surface = "IAM"

    def gather(self) -> IamSummary:
        users = run_aws(["iam", "list-users"], self.config)
        roles = run_aws(["iam", "list-roles"], self.config)
        groups = run_aws(["iam", "list-groups"], self.config)
        policies = run_aws(["iam", "list-policies", "--scope", "Local",
                            "--max-items", str(POLICY_LIMIT)], self.config)
        # Access Analyzer is often not enabled
        analyzers = run_aws_optional(["accessanalyzer", "list-analyzers"], self.config)
        return project_iam(users, roles, groups, policies, analyzers)

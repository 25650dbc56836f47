"""Fleet core — data model, selector matching capability and desire composition."""

from edgefleet.core.composer import compose, match_application
from edgefleet.core.matcher import SelectorMatcher
from edgefleet.core.models import (
    DESIRED_APPLICATIONS,
    DESIRED_SYS_APPLICATIONS,
    LABEL_SYSTEM,
    AppInfo,
    Application,
    ApplicationList,
    AppStats,
    Desire,
    InstanceStats,
    ListOptions,
    Node,
    NodeInfo,
    NodeList,
    NodeStats,
    Report,
    Shadow,
    ShadowList,
    merge_reports,
)

__all__ = [
    "DESIRED_APPLICATIONS",
    "DESIRED_SYS_APPLICATIONS",
    "LABEL_SYSTEM",
    "AppInfo",
    "AppStats",
    "Application",
    "ApplicationList",
    "Desire",
    "InstanceStats",
    "ListOptions",
    "Node",
    "NodeInfo",
    "NodeList",
    "NodeStats",
    "Report",
    "SelectorMatcher",
    "Shadow",
    "ShadowList",
    "compose",
    "match_application",
    "merge_reports",
]

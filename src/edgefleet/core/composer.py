"""Desire composition — match an application catalog against node labels."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from edgefleet.core.models import (
    DESIRED_APPLICATIONS,
    DESIRED_SYS_APPLICATIONS,
    AppInfo,
    Application,
    Desire,
)
from edgefleet.errors import MatchEvaluationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from edgefleet.core.matcher import SelectorMatcher

logger = logging.getLogger(__name__)


def match_application(matcher: SelectorMatcher, app: Application, labels: dict[str, str]) -> bool:
    """Evaluate *app*'s selector against *labels*.

    Selector-less applications never match.  Any matcher failure is
    raised as :class:`MatchEvaluationError`.
    """
    if not app.selector:
        return False
    try:
        return matcher.is_label_match(app.selector, labels)
    except MatchEvaluationError:
        raise
    except Exception as exc:
        raise MatchEvaluationError(app.selector, str(exc)) from exc


def compose(
    apps: Iterable[Application],
    labels: dict[str, str],
    matcher: SelectorMatcher,
) -> tuple[Desire, list[str]]:
    """Compute the full desire of a node with *labels*.

    Walks *apps* in catalog order.  Matching system applications land in
    the ``sysapps`` bucket, the rest in ``apps``.  Both buckets are always
    present.  The second element lists every matched application name, in
    order, for the application index.  A repeated application name keeps
    its first match only.
    """
    buckets: dict[str, list[AppInfo]] = {
        DESIRED_APPLICATIONS: [],
        DESIRED_SYS_APPLICATIONS: [],
    }
    matched: list[str] = []
    seen: set[str] = set()

    for app in apps:
        if app.name in seen or not match_application(matcher, app, labels):
            continue
        seen.add(app.name)
        buckets[app.desire_key].append(AppInfo(name=app.name, version=app.version))
        matched.append(app.name)

    logger.debug("Composed desire for labels %s: %s", labels, matched)
    return Desire(buckets), matched

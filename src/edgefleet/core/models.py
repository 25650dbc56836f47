"""Fleet data model — applications, nodes, shadows and their kind maps.

A :class:`Node` is the declared resource; its ``desire``/``report`` fields
are a create-time snapshot.  The :class:`Shadow` with the same
``(namespace, name)`` is the live twin and is authoritative once it exists.

:class:`Desire` and :class:`Report` are *kind maps*: mappings from a
kind-key (``"apps"``, ``"nodestats"``, ...) to a payload.  Known keys are
validated into typed payloads; unknown keys pass through untouched so that
node agents can report kinds this package does not know about.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter, field_validator

# Desire / report kind-keys
DESIRED_APPLICATIONS = "apps"
DESIRED_SYS_APPLICATIONS = "sysapps"
REPORT_APPS = "apps"
REPORT_SYS_APPS = "sysapps"
REPORT_APP_STATS = "appstats"
REPORT_SYS_APP_STATS = "sysappstats"
REPORT_NODE_INFO = "node"
REPORT_NODE_STATS = "nodestats"

# Application label marking a platform-managed (system) application.
LABEL_SYSTEM = "baetyl-cloud-system"


class AppInfo(BaseModel):
    """Identity of a workload at a specific build."""

    name: str
    version: str = ""


class InstanceStats(BaseModel):
    """Runtime statistics of a single application instance."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    usage: dict[str, str] = {}
    status: str = ""


class AppStats(BaseModel):
    """Per-application statistics reported by a node agent."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str = ""
    status: str = ""
    instances: dict[str, InstanceStats] = {}


class NodeInfo(BaseModel):
    """Host facts reported by a node agent."""

    model_config = ConfigDict(extra="allow")

    hostname: str = ""
    address: str = ""
    arch: str = ""
    kernel_version: str = ""
    os: str = ""
    container_runtime: str = ""
    machine_id: str = ""
    boot_id: str = ""
    system_uuid: str = ""
    os_image: str = ""


class NodeStats(BaseModel):
    """Resource usage and capacity reported by a node agent."""

    model_config = ConfigDict(extra="allow")

    usage: dict[str, str] = {}
    capacity: dict[str, str] = {}


_APP_INFO_LIST: TypeAdapter[list[AppInfo]] = TypeAdapter(list[AppInfo])


class _KindMap(RootModel[dict[str, Any]]):
    """Mapping of kind-key to payload, coercing known keys to typed payloads."""

    root: dict[str, Any] = Field(default_factory=dict)

    kinds: ClassVar[dict[str, TypeAdapter[Any]]] = {}

    @field_validator("root")
    @classmethod
    def _coerce_payloads(cls, value: dict[str, Any]) -> dict[str, Any]:
        return {key: cls._coerce(key, item) for key, item in value.items()}

    @classmethod
    def _coerce(cls, key: str, value: Any) -> Any:
        adapter = cls.kinds.get(key)
        if adapter is None or value is None:
            return value
        return adapter.validate_python(value)

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self.root[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.root[key] = self._coerce(key, value)

    def __delitem__(self, key: str) -> None:
        del self.root[key]

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def get(self, key: str, default: Any = None) -> Any:
        return self.root.get(key, default)

    def keys(self) -> list[str]:
        return list(self.root)

    def items(self) -> list[tuple[str, Any]]:
        return list(self.root.items())


class Desire(_KindMap):
    """The application versions a node is instructed to run."""

    kinds: ClassVar[dict[str, TypeAdapter[Any]]] = {
        DESIRED_APPLICATIONS: _APP_INFO_LIST,
        DESIRED_SYS_APPLICATIONS: _APP_INFO_LIST,
    }

    def app_infos(self, key: str) -> list[AppInfo]:
        """Return a copy of the :class:`AppInfo` list at *key* (empty if absent)."""
        value = self.root.get(key)
        if not value:
            return []
        return list(self._coerce(key, value))

    def set_app_infos(self, key: str, infos: list[AppInfo]) -> None:
        self.root[key] = list(infos)


class Report(_KindMap):
    """Telemetry pushed by a node agent."""

    kinds: ClassVar[dict[str, TypeAdapter[Any]]] = {
        REPORT_APPS: _APP_INFO_LIST,
        REPORT_SYS_APPS: _APP_INFO_LIST,
        REPORT_APP_STATS: TypeAdapter(list[AppStats]),
        REPORT_SYS_APP_STATS: TypeAdapter(list[AppStats]),
        REPORT_NODE_INFO: TypeAdapter(NodeInfo),
        REPORT_NODE_STATS: TypeAdapter(NodeStats),
    }

    def merge(self, incoming: Report | Mapping[str, Any]) -> Report:
        """Overwrite every key of *incoming* into this report and return *self*.

        The merge is shallow: a value present in *incoming* replaces the
        existing value wholesale, collections included.  Keys absent from
        *incoming* are left unchanged.
        """
        entries = incoming.root if isinstance(incoming, Report) else incoming
        for key, value in entries.items():
            self[key] = value
        return self


def merge_reports(base: Report, incoming: Report | Mapping[str, Any]) -> Report:
    """Return a new report with *incoming* merged over *base*.

    Neither input is mutated and the result shares no payload objects with
    either of them.
    """
    entries = incoming.root if isinstance(incoming, Report) else incoming
    return base.model_copy(deep=True).merge(copy.deepcopy(dict(entries)))


class Application(BaseModel):
    """An application in a namespace's catalog.

    An empty ``selector`` means the application is never assigned
    automatically.
    """

    namespace: str = ""
    name: str
    version: str = ""
    selector: str = ""
    system: bool = False
    labels: dict[str, str] = {}

    @property
    def is_system(self) -> bool:
        """``True`` for platform-managed applications."""
        return self.system or LABEL_SYSTEM in self.labels

    @property
    def desire_key(self) -> str:
        """The desire bucket this application is tracked in."""
        return DESIRED_SYS_APPLICATIONS if self.is_system else DESIRED_APPLICATIONS

    def info(self) -> AppInfo:
        return AppInfo(name=self.name, version=self.version)


class Node(BaseModel):
    """A registered edge node."""

    namespace: str = ""
    name: str
    labels: dict[str, str] = {}
    desire: Desire = Field(default_factory=Desire)
    report: Report = Field(default_factory=Report)

    def with_shadow(self, shadow: Shadow | None) -> Node:
        """Return a copy whose desire/report come from *shadow* (if any)."""
        node = self.model_copy(deep=True)
        if shadow is not None:
            node.desire = shadow.desire.model_copy(deep=True)
            node.report = shadow.report.model_copy(deep=True)
        return node


class Shadow(BaseModel):
    """The live twin of a node."""

    namespace: str = ""
    name: str
    desire: Desire = Field(default_factory=Desire)
    report: Report = Field(default_factory=Report)
    resource_version: str = ""

    @classmethod
    def from_node(cls, node: Node) -> Shadow:
        """Seed a new shadow from the node's declared desire."""
        return cls(
            namespace=node.namespace,
            name=node.name,
            desire=node.desire.model_copy(deep=True),
        )


class ListOptions(BaseModel):
    """Filter and paging options for list queries.

    ``page_size`` of 0 disables paging; ``page_no`` starts at 1.
    """

    label_selector: str = ""
    name_contains: str = ""
    page_no: int = 0
    page_size: int = 0


class NodeList(BaseModel):
    items: list[Node] = []
    total: int = 0


class ShadowList(BaseModel):
    items: list[Shadow] = []
    total: int = 0


class ApplicationList(BaseModel):
    items: list[Application] = []
    total: int = 0

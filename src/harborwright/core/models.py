#!/usr/bin/env python3
"""
HARBORWRIGHT CORE MODELS
------------------------
Defines the objects flowing through a registry reconciliation:

- The parent specification (Harbor) supplied by the caller, read-only.
- GeneratedSecret, a named bundle of credential strings.
- Registry, the derived component specification. It references secrets
  by name only and never embeds their values.

Each produced object renders itself as a Kubernetes-style manifest
(CommentedMap) so it can be exported or verified.

Author: Harborwright Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from ruamel.yaml.comments import CommentedMap

from harborwright.core.errors import ResolutionError

GOHARBOR_API_VERSION = "goharbor.io/v1alpha2"
CORE_API_VERSION = "v1"

# Secret classification tags and their well-known keys
SECRET_TYPE_HTPASSWD = "goharbor.io/htpasswd"
SECRET_TYPE_SINGLE = "goharbor.io/single-secret"
HTPASSWD_FILE_NAME = "htpasswd"
SHARED_SECRET_KEY = "secret"

# Logical redis database per Harbor component
REGISTRY_REDIS = "registry"
REDIS_DATABASE_INDEX = {
    "core": 0,
    "jobservice": 1,
    REGISTRY_REDIS: 2,
    "chartmuseum": 3,
    "clair": 4,
    "trivy": 5,
}
DEFAULT_REDIS_PORT = 6379

STORAGE_DRIVERS = ("filesystem", "s3", "swift", "gcs", "azure", "oss", "inmemory")


def _cmap(*pairs: Tuple[str, Any]) -> CommentedMap:
    """Ordered map that skips None values and empty containers."""
    out = CommentedMap()
    for key, value in pairs:
        if value is None:
            continue
        if isinstance(value, (dict, list, tuple)) and not value:
            continue
        out[key] = value
    return out


def _plain(value: Any) -> Any:
    """Deep-copies mappings/sequences into CommentedMap/list for dumping."""
    if isinstance(value, Mapping):
        return CommentedMap((str(k), _plain(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Parent specification
# ---------------------------------------------------------------------------

class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    def registry(self) -> str:
        """The docker distribution log level matching this Harbor level."""
        return {
            LogLevel.DEBUG: "debug",
            LogLevel.INFO: "info",
            LogLevel.NOTICE: "info",
            LogLevel.WARNING: "warn",
            LogLevel.ERROR: "error",
            LogLevel.FATAL: "error",
        }[self]


@dataclass(frozen=True)
class ObjectMeta:
    name: str
    namespace: str

    def to_manifest(self) -> CommentedMap:
        return _cmap(("name", self.name), ("namespace", self.namespace))


@dataclass(frozen=True)
class ComponentSpec:
    """Sizing and scheduling shared by every Harbor component."""
    replicas: Optional[int] = None
    image: Optional[str] = None
    image_pull_policy: Optional[str] = None
    image_pull_secrets: Tuple[str, ...] = ()
    service_account_name: Optional[str] = None
    node_selector: Mapping[str, str] = field(default_factory=dict)
    tolerations: Tuple[Mapping[str, Any], ...] = ()
    resources: Mapping[str, Any] = field(default_factory=dict)

    def to_manifest(self) -> CommentedMap:
        return _cmap(
            ("replicas", self.replicas),
            ("image", self.image),
            ("imagePullPolicy", self.image_pull_policy),
            ("imagePullSecrets", _plain([{"name": s} for s in self.image_pull_secrets])),
            ("serviceAccountName", self.service_account_name),
            ("nodeSelector", _plain(self.node_selector)),
            ("tolerations", _plain(self.tolerations)),
            ("resources", _plain(self.resources)),
        )


@dataclass(frozen=True)
class StorageMiddleware:
    name: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def to_manifest(self) -> CommentedMap:
        return _cmap(("name", self.name), ("options", _plain(self.options)))


@dataclass(frozen=True)
class RegistryComponentSpec:
    """The `spec.registry` section of a Harbor."""
    component: ComponentSpec = field(default_factory=ComponentSpec)
    storage_middlewares: Tuple[StorageMiddleware, ...] = ()
    relative_urls: Optional[bool] = None


@dataclass(frozen=True)
class StorageRedirect:
    disable: bool = False


@dataclass(frozen=True)
class RegistryStorageDriver:
    kind: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def to_manifest(self) -> CommentedMap:
        out = CommentedMap()
        out[self.kind] = _plain(self.options)
        return out


@dataclass(frozen=True)
class ImageChartStorage:
    """`spec.persistence.imageChartStorage`: backend choice for blobs."""
    driver: str = "filesystem"
    options: Mapping[str, Any] = field(default_factory=dict)
    redirect: StorageRedirect = field(default_factory=StorageRedirect)

    def registry(self) -> RegistryStorageDriver:
        if self.driver not in STORAGE_DRIVERS:
            raise ResolutionError(
                f"unsupported storage driver '{self.driver}' (expected one of {', '.join(STORAGE_DRIVERS)})"
            )
        return RegistryStorageDriver(kind=self.driver, options=self.options)


@dataclass(frozen=True)
class OpacifiedDSN:
    """A connection string without credentials plus a reference to them."""
    dsn: str
    password_ref: Optional[str] = None

    def to_manifest(self) -> CommentedMap:
        return _cmap(("dsn", self.dsn), ("passwordRef", self.password_ref))


@dataclass(frozen=True)
class ExternalRedisSpec:
    """Either a full `dsn` or `host`/`port`, plus a password secret name."""
    dsn: Optional[str] = None
    host: Optional[str] = None
    port: int = DEFAULT_REDIS_PORT
    database: Optional[int] = None
    password_ref: Optional[str] = None

    def opacified_dsn(self, default_database: int) -> OpacifiedDSN:
        scheme, user = "redis", ""
        if self.dsn is not None and not isinstance(self.dsn, str):
            raise ResolutionError(f"redis dsn must be a string, got {type(self.dsn).__name__}")
        if self.dsn:
            parsed = urlsplit(self.dsn)
            if parsed.scheme not in ("redis", "rediss"):
                raise ResolutionError(f"unsupported redis scheme '{parsed.scheme}'")
            try:
                host = parsed.hostname
                port = DEFAULT_REDIS_PORT if parsed.port is None else parsed.port
            except ValueError as e:
                raise ResolutionError(f"malformed redis dsn: {e}") from e
            if parsed.password:
                raise ResolutionError("redis dsn must not carry a password, use passwordRef")
            if parsed.username:
                # ACL user names are not secret
                user = f"{parsed.username}@"
            scheme = parsed.scheme
            path = parsed.path.lstrip("/")
            try:
                database = int(path) if path else default_database
            except ValueError:
                raise ResolutionError(f"invalid redis database '{path}'") from None
        else:
            host, port = self.host, self.port
            database = default_database if self.database is None else self.database

        if not host:
            raise ResolutionError("redis host is required")
        if not isinstance(host, str):
            raise ResolutionError(f"redis host must be a string, got {type(host).__name__}")
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ResolutionError(f"invalid redis port {port}")
        if database < 0:
            raise ResolutionError(f"invalid redis database {database}")

        if ":" in host:
            host = f"[{host}]"
        return OpacifiedDSN(dsn=f"{scheme}://{user}{host}:{port}/{database}", password_ref=self.password_ref)


@dataclass(frozen=True)
class HarborSpec:
    registry: RegistryComponentSpec = field(default_factory=RegistryComponentSpec)
    image_chart_storage: ImageChartStorage = field(default_factory=ImageChartStorage)
    log_level: LogLevel = LogLevel.INFO
    redis: ExternalRedisSpec = field(default_factory=ExternalRedisSpec)

    def redis_dsn(self, component: str) -> OpacifiedDSN:
        """Resolves the redis connection used by `component`."""
        if component not in REDIS_DATABASE_INDEX:
            raise ResolutionError(f"unknown redis component '{component}'")
        return self.redis.opacified_dsn(REDIS_DATABASE_INDEX[component])


@dataclass(frozen=True)
class Harbor:
    """The parent specification of a whole Harbor instance."""
    metadata: ObjectMeta
    spec: HarborSpec = field(default_factory=HarborSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace


# ---------------------------------------------------------------------------
# Produced objects
# ---------------------------------------------------------------------------

@dataclass
class GeneratedSecret:
    """
    Credential bundle. Values are excluded from repr so the object can be
    logged or shown in tracebacks safely.
    """
    metadata: ObjectMeta
    type: str
    immutable: bool
    string_data: Dict[str, str] = field(default_factory=dict, repr=False)
    kind: str = "Secret"

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_manifest(self) -> CommentedMap:
        return _cmap(
            ("apiVersion", CORE_API_VERSION),
            ("kind", self.kind),
            ("metadata", self.metadata.to_manifest()),
            ("type", self.type),
            ("immutable", self.immutable),
            ("stringData", CommentedMap(self.string_data)),
        )


@dataclass(frozen=True)
class RegistryLogSpec:
    level: str
    access_log_disabled: bool = False


@dataclass(frozen=True)
class RegistryAuthenticationHTPasswdSpec:
    realm: str
    secret_ref: str


@dataclass(frozen=True)
class RegistryValidationSpec:
    disabled: bool = True


@dataclass(frozen=True)
class RegistryHTTPSpec:
    secret_ref: str
    relative_urls: Optional[bool] = None


@dataclass(frozen=True)
class RegistryStorageCacheSpec:
    blobdescriptor: str = "redis"


@dataclass(frozen=True)
class RegistryStorageSpec:
    driver: RegistryStorageDriver
    cache: RegistryStorageCacheSpec = field(default_factory=RegistryStorageCacheSpec)
    redirect: StorageRedirect = field(default_factory=StorageRedirect)


@dataclass(frozen=True)
class RegistrySpec:
    component: ComponentSpec
    log: RegistryLogSpec
    authentication: RegistryAuthenticationHTPasswdSpec
    validation: RegistryValidationSpec
    storage_middlewares: Tuple[StorageMiddleware, ...]
    http: RegistryHTTPSpec
    storage: RegistryStorageSpec
    redis: OpacifiedDSN

    def secret_refs(self) -> Tuple[str, str]:
        """(authentication secret name, http secret name)"""
        return self.authentication.secret_ref, self.http.secret_ref

    def to_manifest(self) -> CommentedMap:
        spec = self.component.to_manifest()
        spec["log"] = _cmap(
            ("accessLog", _cmap(("disabled", self.log.access_log_disabled))),
            ("level", self.log.level),
        )
        spec["authentication"] = _cmap(
            ("htpasswd", _cmap(
                ("realm", self.authentication.realm),
                ("secretRef", self.authentication.secret_ref),
            )),
        )
        spec["validation"] = _cmap(("disabled", self.validation.disabled))
        spec["middlewares"] = _cmap(
            ("storage", [m.to_manifest() for m in self.storage_middlewares]),
        )
        spec["http"] = _cmap(
            ("relativeURLs", self.http.relative_urls),
            ("secretRef", self.http.secret_ref),
        )
        spec["storage"] = _cmap(
            ("driver", self.storage.driver.to_manifest()),
            ("cache", _cmap(("blobdescriptor", self.storage.cache.blobdescriptor))),
            ("redirect", _cmap(("disable", self.storage.redirect.disable))),
        )
        spec["redis"] = self.redis.to_manifest()
        return spec


@dataclass(frozen=True)
class Registry:
    """The registry component specification, ready for the engine."""
    metadata: ObjectMeta
    spec: RegistrySpec
    kind: str = "Registry"

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_manifest(self) -> CommentedMap:
        return _cmap(
            ("apiVersion", GOHARBOR_API_VERSION),
            ("kind", self.kind),
            ("metadata", self.metadata.to_manifest()),
            ("spec", self.spec.to_manifest()),
        )

"""Configuration objects for openstack-k8s."""

from dataclasses import dataclass, field

DEFAULT_NAMESPACE = "openstack"


@dataclass
class WatcherConfig:
    """Configuration for the ConditionWatcher."""

    default_timeout_seconds: int = 300
    """Timeout applied when a caller passes a non-positive timeout."""

    default_poll_interval_seconds: int = 5
    """Poll interval applied when a caller passes a non-positive interval."""


@dataclass
class UpgradeConfig:
    """Configuration for the UpgradeClient."""

    namespace: str = DEFAULT_NAMESPACE
    """Namespace used when a caller does not name one."""

    wait_timeout_seconds: int = 600
    """Timeout used by wait_version when the caller does not pass one."""

    wait_poll_interval_seconds: int = 5
    """Poll interval used by wait_version when the caller does not pass one."""

    watcher: WatcherConfig = field(default_factory=WatcherConfig)

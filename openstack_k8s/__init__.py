"""
openstack-k8s inspects and drives a minor update of an OpenStack deployment
managed by the openstack-k8s-operators, by reading and patching its custom
resources.

The library is organized as:
  - `manifest`: parsed representations of the upgrade resources.
  - `store`: access to the cluster objects, and a watcher for waiting on
    conditions.
  - `resume`: decides which step of the update procedure to resume from.
  - `upgrade`: the operations used to drive an update.
"""

__all__ = [
    "manifest",
    "store",
    "resume",
    "upgrade",
    "exceptions",
    "config",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]

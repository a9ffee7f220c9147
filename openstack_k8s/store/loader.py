"""Load object documents from a file into an InMemoryStore.

The file is typically created with a command such as
`kubectl get openstackversions,openstackcontrolplanes -n openstack -o yaml`,
so `List` documents are expanded into their items. Multiple YAML documents in
one file are also supported.
"""

import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from openstack_k8s.exceptions import InputException

from .in_memory import InMemoryStore

_LOGGER = logging.getLogger(__name__)


async def read_objects(path: Path) -> list[dict[str, Any]]:
    """Return the object documents in a YAML file."""
    try:
        async with aiofiles.open(str(path)) as objects_file:
            content = await objects_file.read()
    except OSError as err:
        raise InputException(f"Failed to read file {path}: {err}") from err
    try:
        docs = [doc for doc in yaml.safe_load_all(content) if doc]
    except yaml.YAMLError as err:
        raise InputException(f"Invalid YAML in file {path}: {err}") from err
    for doc in docs:
        if not isinstance(doc, dict):
            raise InputException(f"Invalid object in file {path}: {doc!r}")
    _LOGGER.debug("Read %d documents from %s", len(docs), path)
    return docs


async def load_store(path: Path, default_namespace: str) -> InMemoryStore:
    """Return an InMemoryStore holding the objects in a YAML file."""
    store = InMemoryStore(default_namespace=default_namespace)
    store.add_objects(await read_objects(path))
    return store

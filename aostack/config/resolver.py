# SPDX-License-Identifier: BUSL-1.1
"""Split an application's configuration into plain settings and secrets."""

import logging
from dataclasses import dataclass, field

from aostack.config.loader import ConfigError
from aostack.config.values import Plain, Sensitive


log = logging.getLogger(__name__)


class ClassificationError(ConfigError):
    """Raised when an entry is neither a plain value nor a secret."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"configuration entry '{key}' is neither a plain value nor a secret"
        )


@dataclass
class ResolvedConfiguration:
    plain_config: dict = field(default_factory=dict)   # name -> str
    secrets: dict = field(default_factory=dict)        # name -> Secret

    def names(self) -> set:
        return set(self.plain_config) | set(self.secrets)


def resolve(store, prefix: str, namespace: str) -> ResolvedConfiguration:
    """Collect every ``<namespace>:<prefix>*`` entry of ``store``.

    Names come back with the namespace stripped. Plain entries land in
    ``plain_config`` and secret entries in ``secrets`` as unrevealed
    handles. An entry the store cannot classify raises
    ClassificationError and nothing is returned.
    """
    qualifier = f"{namespace}:"
    config = store.config(namespace)
    plain_config = {}
    secrets = {}

    for key in store.keys():
        if not key.startswith(qualifier):
            continue
        name = key[len(qualifier):]
        if not name.startswith(prefix):
            continue

        result = config.lookup(name)
        if isinstance(result, Plain):
            plain_config[name] = result.value
        elif isinstance(result, Sensitive):
            secrets[name] = result.handle
        else:
            raise ClassificationError(key)

    log.debug(
        "resolved %s:%s* -> plain=%s secrets=%s",
        namespace, prefix, sorted(plain_config), sorted(secrets),
    )
    return ResolvedConfiguration(plain_config, secrets)

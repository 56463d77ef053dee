"""
Resource-type policy for plangate.

A policy is two disjoint sets of resource types:

    always_unsafe   modifying, replacing or destroying one always needs approval
    always_safe     modifying, replacing or destroying one never needs approval

Creation of new resources never consults either set. A type in neither set
is "unhandled" and falls back to the per-action default in rules.py.

YAML form:

    always_unsafe:
      - aws_instance
    always_safe:
      - aws_security_group_rule
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Optional

import yaml

from plangate.core.canonical import canonical_hash
from plangate.core.exceptions import PolicyConfigError
from plangate.core.models import MatchSource

logger = logging.getLogger(__name__)

# Accepted spellings for each list, first one is canonical
_UNSAFE_KEYS = ("always_unsafe", "AlwaysUnsafe", "ResourceTypesAlwaysUnsafe")
_SAFE_KEYS   = ("always_safe", "AlwaysSafe", "ResourceTypesAlwaysSafe")


@dataclass(frozen=True)
class PolicySet:
    """
    Immutable always-unsafe / always-safe resource type sets.

    The two sets must not overlap; a type listed in both would make the
    verdict depend on lookup order.
    """
    always_unsafe: FrozenSet[str] = field(default_factory=frozenset)
    always_safe:   FrozenSet[str] = field(default_factory=frozenset)
    source:        str = "<inline>"

    def __post_init__(self):
        object.__setattr__(self, "always_unsafe", frozenset(self.always_unsafe))
        object.__setattr__(self, "always_safe", frozenset(self.always_safe))

        overlap = self.always_unsafe & self.always_safe
        if overlap:
            raise PolicyConfigError(
                "resource types listed as both always-unsafe and always-safe",
                {"types": ", ".join(sorted(overlap)), "source": self.source},
            )

    @property
    def is_empty(self) -> bool:
        return not self.always_unsafe and not self.always_safe

    @property
    def policy_hash(self) -> str:
        """Deterministic fingerprint of the two sets, independent of list order."""
        return canonical_hash({
            "always_unsafe": sorted(self.always_unsafe),
            "always_safe":   sorted(self.always_safe),
        })

    def lookup(self, resource_type: str) -> MatchSource:
        """Return which set holds resource_type, or UNHANDLED."""
        if resource_type in self.always_unsafe:
            return MatchSource.ALWAYS_UNSAFE
        if resource_type in self.always_safe:
            return MatchSource.ALWAYS_SAFE
        return MatchSource.UNHANDLED

    def extend(
        self,
        unsafe: Iterable[str] = (),
        safe: Iterable[str] = (),
    ) -> "PolicySet":
        """Return a new PolicySet with extra types added to each list."""
        unsafe = frozenset(unsafe)
        safe = frozenset(safe)
        if not unsafe and not safe:
            return self
        return PolicySet(
            always_unsafe= self.always_unsafe | unsafe,
            always_safe=   self.always_safe | safe,
            source=        f"{self.source}+overrides",
        )

    def to_dict(self) -> dict:
        return {
            "always_unsafe": sorted(self.always_unsafe),
            "always_safe":   sorted(self.always_safe),
        }

    @staticmethod
    def from_dict(data: Optional[dict], source: str = "<inline>") -> "PolicySet":
        """Load a policy from a dictionary. None or {} gives an empty policy."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PolicyConfigError(
                "policy must be a mapping", {"source": source, "got": type(data).__name__},
            )
        unknown = sorted(str(k) for k in data if k not in _UNSAFE_KEYS + _SAFE_KEYS)
        if unknown:
            raise PolicyConfigError(
                "policy has unknown keys",
                {"keys": ", ".join(unknown), "source": source},
            )

        return PolicySet(
            always_unsafe= _read_type_list(data, _UNSAFE_KEYS, source),
            always_safe=   _read_type_list(data, _SAFE_KEYS, source),
            source=        source,
        )

    @classmethod
    def from_yaml(cls, policy_file: Path) -> "PolicySet":
        """Load policy from YAML file."""
        policy_file = Path(policy_file)
        try:
            with open(policy_file, "r", encoding="utf-8") as f:
                policy_config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise PolicyConfigError("policy file not found", {"path": str(policy_file)}) from e
        except yaml.YAMLError as e:
            raise PolicyConfigError(
                "policy file is not valid YAML", {"path": str(policy_file), "error": e},
            ) from e

        policy = cls.from_dict(policy_config, source=str(policy_file))
        logger.debug(
            "loaded policy %s: %d always-unsafe, %d always-safe",
            policy_file, len(policy.always_unsafe), len(policy.always_safe),
        )
        return policy


def load_policy(
    policy_file: Optional[Path] = None,
    unsafe: Iterable[str] = (),
    safe: Iterable[str] = (),
) -> PolicySet:
    """
    Build the policy for one run: optional YAML file plus command-line additions.

    With no file and no additions every type is unhandled, so every destroy
    or replace will require approval.
    """
    if policy_file is not None:
        policy = PolicySet.from_yaml(policy_file)
    else:
        policy = PolicySet(source="<empty>")

    policy = policy.extend(unsafe=unsafe, safe=safe)
    if policy.is_empty:
        logger.warning(
            "No policy configured: every destroyed or replaced resource will require approval"
        )
    return policy


def _read_type_list(data: dict, keys: tuple, source: str) -> FrozenSet[str]:
    present = [k for k in keys if k in data]
    if len(present) > 1:
        raise PolicyConfigError(
            "policy repeats a list under more than one key",
            {"keys": ", ".join(present), "source": source},
        )
    if not present:
        return frozenset()

    key = present[0]
    values: Any = data[key]
    if values is None:
        return frozenset()
    if isinstance(values, str) or not isinstance(values, list):
        raise PolicyConfigError(
            f"'{key}' must be a list of resource types", {"source": source},
        )

    types = set()
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise PolicyConfigError(
                f"'{key}' entries must be non-empty strings",
                {"source": source, "entry": repr(value)},
            )
        types.add(value.strip())
    return frozenset(types)

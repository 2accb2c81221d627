"""
Updater Data Model
Pods, recommendations, resource policies and the workloads that own them
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Container policy applied to containers without their own entry
DEFAULT_CONTAINER_POLICY = "*"


@dataclass
class Container:
    """A container and its current resource requests (base units)"""
    name: str
    requests: Dict[str, float] = field(default_factory=dict)


@dataclass
class Instance:
    """A running pod belonging to a workload"""
    namespace: str
    name: str
    containers: List[Container] = field(default_factory=list)
    phase: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ContainerRecommendation:
    """Recommended request per resource for one container"""
    name: str
    target: Dict[str, float] = field(default_factory=dict)


@dataclass
class Recommendation:
    """Recommender output for a workload, matched to pod containers by name"""
    containers: List[ContainerRecommendation] = field(default_factory=list)

    def for_container(self, container_name: str) -> Optional[ContainerRecommendation]:
        for container in self.containers:
            if container.name == container_name:
                return container
        return None


@dataclass
class ContainerPolicy:
    """Allowed [min, max] request per resource for one container"""
    name: str
    min_allowed: Dict[str, float] = field(default_factory=dict)
    max_allowed: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for resource, minimum in self.min_allowed.items():
            maximum = self.max_allowed.get(resource)
            if maximum is not None and minimum > maximum:
                raise ValueError(
                    f"Container policy {self.name}: min {minimum} > max {maximum} for {resource}"
                )

    def clamp(self, resource: str, value: float) -> float:
        """Bound a recommended value into this policy's range for the resource"""
        minimum = self.min_allowed.get(resource)
        maximum = self.max_allowed.get(resource)
        if minimum is not None and value < minimum:
            return minimum
        if maximum is not None and value > maximum:
            return maximum
        return value


@dataclass
class ResourcesPolicy:
    """Per-container resource bounds of a workload"""
    containers: List[ContainerPolicy] = field(default_factory=list)

    def for_container(self, container_name: str) -> Optional[ContainerPolicy]:
        default = None
        for policy in self.containers:
            if policy.name == container_name:
                return policy
            if policy.name == DEFAULT_CONTAINER_POLICY:
                default = policy
        return default


@dataclass
class UpdateConfig:
    """Update tuning for a workload"""
    min_change_threshold: float = 0.0

    def __post_init__(self):
        if not math.isfinite(self.min_change_threshold) or self.min_change_threshold < 0:
            raise ValueError(
                f"min_change_threshold must be a finite value >= 0, got {self.min_change_threshold}"
            )


@dataclass
class SelectorRequirement:
    """A matchExpressions entry of a label selector"""
    key: str
    operator: str
    values: Tuple[str, ...] = ()


@dataclass
class Workload:
    """
    An autoscaled workload and its update policy.

    min_replicas and eviction_tolerance of None fall back to the
    updater-wide defaults.
    """
    namespace: str
    name: str
    selector: Dict[str, str] = field(default_factory=dict)
    match_expressions: List[SelectorRequirement] = field(default_factory=list)
    replicas: int = 0
    resources_policy: Optional[ResourcesPolicy] = None
    update_config: Optional[UpdateConfig] = None
    min_replicas: Optional[int] = None
    eviction_tolerance: Optional[float] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

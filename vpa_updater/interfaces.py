"""
Collaborator Interfaces
Capabilities the updater consumes from the cluster and the recommender
"""

from typing import List, Protocol

from vpa_updater.models import Instance, Recommendation, Workload


class WorkloadLister(Protocol):
    """Source of autoscaled workloads and their policies"""

    def list_workloads(self) -> List[Workload]:
        ...


class InstanceLister(Protocol):
    """Lists the pods currently selected by a workload"""

    def list_instances(self, workload: Workload) -> List[Instance]:
        ...


class RecommenderSource(Protocol):
    """Produces resource recommendations; raises when none is available"""

    def get_recommendation(self, workload_id: str) -> Recommendation:
        ...


class EvictionController(Protocol):
    """Eligibility check and eviction of a single pod"""

    def can_evict(self, instance: Instance) -> bool:
        ...

    def evict(self, instance: Instance) -> None:
        ...

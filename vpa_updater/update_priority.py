"""
Update Priority Calculator
Scores pods by how far their resource requests are from the recommendation
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from vpa_updater.models import Instance, Recommendation, ResourcesPolicy, UpdateConfig

logger = logging.getLogger(__name__)


@dataclass
class PriorityRecord:
    """A candidate pod and its accumulated update priority"""
    instance: Instance
    priority: float


class UpdatePriorityCalculator:
    """
    Collects pods of one workload and orders those that need an update.

    Priority of a pod is the sum, over every container and resource that has
    both a current request and a recommendation, of the relative difference
    |recommended / current - 1|. The recommendation is first clamped into the
    container's policy bounds, so a pod that already complies with the policy
    is never flagged because the raw recommendation is more extreme.

    A calculator is meant to be used once per workload per updater pass:
    add pods with add_instance(), then read get_sorted_instances().
    """

    def __init__(self, resources_policy: Optional[ResourcesPolicy] = None,
                 update_config: Optional[UpdateConfig] = None):
        self.resources_policy = resources_policy
        self.update_config = update_config or UpdateConfig()
        self._records: List[PriorityRecord] = []

    def add_instance(self, instance: Instance, recommendation: Recommendation):
        """Score a pod and keep it if the change exceeds the configured threshold"""
        priority = self._get_update_priority(instance, recommendation)

        if priority <= self.update_config.min_change_threshold:
            logger.debug(
                f"{instance.key} - Update not required "
                f"(priority {priority:.3f} <= threshold {self.update_config.min_change_threshold})"
            )
            return

        self._records.append(PriorityRecord(instance=instance, priority=priority))

    def get_sorted_instances(self) -> List[Instance]:
        """
        Pods needing an update, highest priority first.

        Equal priorities keep the order the pods were added in.
        """
        ordered = sorted(self._records, key=lambda record: record.priority, reverse=True)
        return [record.instance for record in ordered]

    def _get_update_priority(self, instance: Instance, recommendation: Recommendation) -> float:
        priority = 0.0

        for container in instance.containers:
            container_recommendation = recommendation.for_container(container.name)
            if container_recommendation is None:
                continue

            policy = None
            if self.resources_policy is not None:
                policy = self.resources_policy.for_container(container.name)

            for resource, current in container.requests.items():
                if resource not in container_recommendation.target:
                    continue

                recommended = container_recommendation.target[resource]
                if policy is not None:
                    recommended = policy.clamp(resource, recommended)

                priority += self._relative_diff(current, recommended)

        return priority

    @staticmethod
    def _relative_diff(current: float, recommended: float) -> float:
        if current == 0:
            # Nothing requested but something recommended: update first
            return math.inf if recommended != 0 else 0.0
        return abs(recommended / current - 1)

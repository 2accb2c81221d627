"""
Kubernetes Collaborators
Workload, pod and recommendation listing plus pod eviction on the Kubernetes API

VPA objects are read from the autoscaling.k8s.io/v1 VerticalPodAutoscaler
custom resource. Optional annotations on a VPA:
- vpa-updater.io/min-change-threshold: "0.1"   # UpdateConfig.min_change_threshold
- vpa-updater.io/eviction-tolerance: "0.25"     # overrides EVICTION_TOLERANCE
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from kubernetes import client, config as k8s_config
from kubernetes.config.config_exception import ConfigException

from vpa_updater.models import (
    Container, ContainerPolicy, ContainerRecommendation, Instance, Recommendation,
    ResourcesPolicy, SelectorRequirement, UpdateConfig, Workload
)
from vpa_updater.quantity import parse_resource_list

logger = logging.getLogger(__name__)

VPA_GROUP = "autoscaling.k8s.io"
VPA_VERSION = "v1"
VPA_PLURAL = "verticalpodautoscalers"

ANNOTATION_PREFIX = "vpa-updater.io"
ANNOTATION_MIN_CHANGE_THRESHOLD = f"{ANNOTATION_PREFIX}/min-change-threshold"
ANNOTATION_EVICTION_TOLERANCE = f"{ANNOTATION_PREFIX}/eviction-tolerance"

# Update modes under which the updater leaves running pods alone
PASSIVE_UPDATE_MODES = ("Off", "Initial")

SELECTOR_OPERATORS = ("In", "NotIn", "Exists", "DoesNotExist")


class RecommendationNotAvailable(Exception):
    """The VPA exists but carries no recommendation yet"""


def load_kube_config():
    """Load in-cluster config, falling back to the local kubeconfig"""
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except ConfigException:
        k8s_config.load_kube_config()
        logger.info("Loaded local Kubernetes config")


def label_selector(selector: Dict[str, str],
                   match_expressions: Sequence[SelectorRequirement] = ()) -> str:
    """Render matchLabels and matchExpressions as a label selector string"""
    terms = [f"{key}={selector[key]}" for key in sorted(selector)]

    for requirement in match_expressions:
        values = ",".join(requirement.values)
        if requirement.operator == "In":
            terms.append(f"{requirement.key} in ({values})")
        elif requirement.operator == "NotIn":
            terms.append(f"{requirement.key} notin ({values})")
        elif requirement.operator == "Exists":
            terms.append(requirement.key)
        elif requirement.operator == "DoesNotExist":
            terms.append(f"!{requirement.key}")
        else:
            raise ValueError(f"Unsupported selector operator: {requirement.operator}")

    return ",".join(terms)


def parse_match_expressions(label_selector_spec) -> List[SelectorRequirement]:
    """Read matchExpressions of a V1LabelSelector"""
    requirements = []
    for expression in label_selector_spec.match_expressions or []:
        if expression.operator not in SELECTOR_OPERATORS:
            raise ValueError(f"Unsupported selector operator: {expression.operator}")
        if expression.operator in ("In", "NotIn") and not expression.values:
            raise ValueError(f"Selector operator {expression.operator} on {expression.key} needs values")
        requirements.append(SelectorRequirement(
            key=expression.key,
            operator=expression.operator,
            values=tuple(expression.values or ())
        ))
    return requirements


def pod_to_instance(pod) -> Instance:
    """Convert a V1Pod into an Instance"""
    containers = []
    for container in pod.spec.containers or []:
        requests = {}
        if container.resources and container.resources.requests:
            requests = parse_resource_list(container.resources.requests)
        containers.append(Container(name=container.name, requests=requests))

    return Instance(
        namespace=pod.metadata.namespace,
        name=pod.metadata.name,
        containers=containers,
        phase=pod.status.phase if pod.status else None
    )


def parse_resources_policy(vpa: Dict[str, Any]) -> Optional[ResourcesPolicy]:
    """Read spec.resourcePolicy.containerPolicies of a VPA object"""
    resource_policy = (vpa.get("spec") or {}).get("resourcePolicy") or {}
    container_policies = resource_policy.get("containerPolicies") or []
    if not container_policies:
        return None

    return ResourcesPolicy(containers=[
        ContainerPolicy(
            name=policy["containerName"],
            min_allowed=parse_resource_list(policy.get("minAllowed") or {}),
            max_allowed=parse_resource_list(policy.get("maxAllowed") or {})
        )
        for policy in container_policies
    ])


def parse_recommendation(vpa: Dict[str, Any]) -> Optional[Recommendation]:
    """Read status.recommendation.containerRecommendations of a VPA object"""
    recommendation = (vpa.get("status") or {}).get("recommendation") or {}
    container_recommendations = recommendation.get("containerRecommendations") or []
    if not container_recommendations:
        return None

    return Recommendation(containers=[
        ContainerRecommendation(
            name=entry["containerName"],
            target=parse_resource_list(entry.get("target") or {})
        )
        for entry in container_recommendations
    ])


class KubeWorkloadLister:
    """Lists VPA objects and resolves their target controllers"""

    def __init__(self, custom_api: client.CustomObjectsApi, apps_v1: client.AppsV1Api,
                 namespace: str = ""):
        self.custom_api = custom_api
        self.apps_v1 = apps_v1
        self.namespace = namespace

    def list_workloads(self) -> List[Workload]:
        if self.namespace:
            response = self.custom_api.list_namespaced_custom_object(
                VPA_GROUP, VPA_VERSION, self.namespace, VPA_PLURAL
            )
        else:
            response = self.custom_api.list_cluster_custom_object(VPA_GROUP, VPA_VERSION, VPA_PLURAL)

        workloads = []
        for vpa in response.get("items", []):
            metadata = vpa.get("metadata") or {}
            key = f"{metadata.get('namespace')}/{metadata.get('name')}"

            update_mode = ((vpa.get("spec") or {}).get("updatePolicy") or {}).get("updateMode", "Auto")
            if update_mode in PASSIVE_UPDATE_MODES:
                logger.debug(f"{key} - Update mode {update_mode}, not managed")
                continue

            try:
                workloads.append(self._to_workload(vpa))
            except Exception as e:
                logger.error(f"{key} - Skipping VPA: {e}")

        return workloads

    def _to_workload(self, vpa: Dict[str, Any]) -> Workload:
        metadata = vpa["metadata"]
        spec = vpa.get("spec") or {}
        namespace = metadata["namespace"]
        annotations = metadata.get("annotations") or {}

        target_ref = spec.get("targetRef")
        if not target_ref:
            raise ValueError("spec.targetRef is missing")
        target = self._read_target(target_ref, namespace)

        selector = {}
        match_expressions = []
        if target.spec and target.spec.selector:
            selector = dict(target.spec.selector.match_labels or {})
            match_expressions = parse_match_expressions(target.spec.selector)
        if not selector and not match_expressions:
            raise ValueError(f"target {target_ref.get('kind')}/{target_ref.get('name')} has an empty selector")

        replicas = (target.status.replicas if target.status else None) or 0

        update_config = None
        if ANNOTATION_MIN_CHANGE_THRESHOLD in annotations:
            update_config = UpdateConfig(min_change_threshold=float(annotations[ANNOTATION_MIN_CHANGE_THRESHOLD]))

        eviction_tolerance = None
        if ANNOTATION_EVICTION_TOLERANCE in annotations:
            eviction_tolerance = float(annotations[ANNOTATION_EVICTION_TOLERANCE])
            if not 0.0 <= eviction_tolerance <= 1.0:
                raise ValueError(f"{ANNOTATION_EVICTION_TOLERANCE} must be between 0 and 1, got {eviction_tolerance}")

        min_replicas = (spec.get("updatePolicy") or {}).get("minReplicas")

        return Workload(
            namespace=namespace,
            name=metadata["name"],
            selector=selector,
            match_expressions=match_expressions,
            replicas=replicas,
            resources_policy=parse_resources_policy(vpa),
            update_config=update_config,
            min_replicas=int(min_replicas) if min_replicas is not None else None,
            eviction_tolerance=eviction_tolerance
        )

    def _read_target(self, target_ref: Dict[str, str], namespace: str):
        kind = target_ref.get("kind")
        name = target_ref.get("name")

        if kind == "Deployment":
            return self.apps_v1.read_namespaced_deployment(name, namespace)
        if kind == "StatefulSet":
            return self.apps_v1.read_namespaced_stateful_set(name, namespace)
        if kind == "ReplicaSet":
            return self.apps_v1.read_namespaced_replica_set(name, namespace)
        raise ValueError(f"Unsupported targetRef kind: {kind}")


class KubeInstanceLister:
    """Lists a workload's pods by its label selector"""

    def __init__(self, core_v1: client.CoreV1Api):
        self.core_v1 = core_v1

    def list_instances(self, workload: Workload) -> List[Instance]:
        pods = self.core_v1.list_namespaced_pod(
            namespace=workload.namespace,
            label_selector=label_selector(workload.selector, workload.match_expressions)
        )
        return [pod_to_instance(pod) for pod in pods.items]


class KubeRecommenderSource:
    """Reads the recommendation published in a VPA's status"""

    def __init__(self, custom_api: client.CustomObjectsApi):
        self.custom_api = custom_api

    def get_recommendation(self, workload_id: str) -> Recommendation:
        namespace, name = workload_id.split("/", 1)
        vpa = self.custom_api.get_namespaced_custom_object(
            VPA_GROUP, VPA_VERSION, namespace, VPA_PLURAL, name
        )

        recommendation = parse_recommendation(vpa)
        if recommendation is None:
            raise RecommendationNotAvailable(f"VPA {workload_id} has no recommendation yet")
        return recommendation


class KubeEvictionController:
    """Evicts pods through the Eviction API so PodDisruptionBudgets are honoured"""

    def __init__(self, core_v1: client.CoreV1Api, dry_run: bool = False):
        self.core_v1 = core_v1
        self.dry_run = dry_run

    def can_evict(self, instance: Instance) -> bool:
        return instance.phase == "Running"

    def evict(self, instance: Instance) -> None:
        if self.dry_run:
            logger.info(f"[DRY RUN] Would evict {instance.key}")
            return

        body = client.V1Eviction(
            metadata=client.V1ObjectMeta(name=instance.name, namespace=instance.namespace)
        )
        self.core_v1.create_namespaced_pod_eviction(
            name=instance.name,
            namespace=instance.namespace,
            body=body
        )

"""
Test builders for pods, recommendations, policies and workloads
"""

from vpa_updater.models import (
    Container, ContainerPolicy, ContainerRecommendation, Instance,
    Recommendation, ResourcesPolicy, Workload
)
from vpa_updater.quantity import parse_quantity

CONTAINER_NAME = "container1"


def _requests(cpu: str = "", mem: str = "") -> dict:
    requests = {}
    if cpu:
        requests["cpu"] = parse_quantity(cpu)
    if mem:
        requests["memory"] = parse_quantity(mem)
    return requests


def build_container(name: str, cpu: str = "", mem: str = "") -> Container:
    return Container(name=name, requests=_requests(cpu, mem))


def build_instance(name: str, container_name: str = CONTAINER_NAME, cpu: str = "", mem: str = "",
                   phase: str = "Running") -> Instance:
    return Instance(
        namespace="default",
        name=name,
        containers=[build_container(container_name, cpu, mem)],
        phase=phase
    )


def build_recommendation(container_name: str = CONTAINER_NAME, cpu: str = "", mem: str = "") -> Recommendation:
    return Recommendation(containers=[
        ContainerRecommendation(name=container_name, target=_requests(cpu, mem))
    ])


def build_policy(container_name: str, min_cpu: str, max_cpu: str, min_mem: str, max_mem: str) -> ResourcesPolicy:
    return ResourcesPolicy(containers=[
        ContainerPolicy(
            name=container_name,
            min_allowed={"cpu": parse_quantity(min_cpu), "memory": parse_quantity(min_mem)},
            max_allowed={"cpu": parse_quantity(max_cpu), "memory": parse_quantity(max_mem)}
        )
    ])


def build_workload(name: str = "app", replicas: int = 10, **kwargs) -> Workload:
    return Workload(
        namespace="default",
        name=name,
        selector={"app": name},
        replicas=replicas,
        **kwargs
    )

"""
Known workload types and their job/service classification.
"""

from typing import List

REQUEST_DRIVEN_WEB_SERVICE_TYPE = "Request-Driven Web Service"
LOAD_BALANCED_WEB_SERVICE_TYPE = "Load Balanced Web Service"
BACKEND_SERVICE_TYPE = "Backend Service"
WORKER_SERVICE_TYPE = "Worker Service"
STATIC_SITE_TYPE = "Static Site"
SCHEDULED_JOB_TYPE = "Scheduled Job"

SERVICE_TYPES = (
    REQUEST_DRIVEN_WEB_SERVICE_TYPE,
    LOAD_BALANCED_WEB_SERVICE_TYPE,
    BACKEND_SERVICE_TYPE,
    WORKER_SERVICE_TYPE,
    STATIC_SITE_TYPE,
)
JOB_TYPES = (SCHEDULED_JOB_TYPE,)
WORKLOAD_TYPES = SERVICE_TYPES + JOB_TYPES

# Labels used in command construction and error tags.
SVC_FAMILY = "svc"
JOB_FAMILY = "job"


def is_job(workload_type: str) -> bool:
    return workload_type in JOB_TYPES


def is_known(workload_type: str) -> bool:
    return workload_type in WORKLOAD_TYPES


def classify_workload(workload_type: str) -> str:
    """
    Return the workload family for a type.

    Anything that is not a job is deployed as a service.
    """
    return JOB_FAMILY if is_job(workload_type) else SVC_FAMILY


def workload_types() -> List[str]:
    return list(WORKLOAD_TYPES)

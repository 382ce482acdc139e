"""Kubernetes API client construction shared by all orchestrators."""

import logging
from typing import Optional

from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from cloudcontrol.exceptions import ClusterConnectionError
from cloudcontrol.models import ClusterConfig

logger = logging.getLogger(__name__)

# Errors the client raises for rejected requests and broken connections
API_ERRORS = (ApiException, HTTPError, OSError)


def build_api_client(cluster: ClusterConfig) -> client.ApiClient:
    """
    Create an API client for the configured cluster.

    Credentials come from the in-cluster service account or the local
    kubeconfig. An explicit master URL overrides the server address.

    Raises:
        ClusterConnectionError: If no configuration can be found
    """
    configuration = client.Configuration()

    try:
        kube_config.load_incluster_config(client_configuration=configuration)
        logger.debug("Using in-cluster configuration")
    except ConfigException:
        try:
            kube_config.load_kube_config(client_configuration=configuration)
            logger.debug("Using kubeconfig")
        except (ConfigException, OSError) as e:
            if not cluster.master_url:
                raise ClusterConnectionError(None, str(e)) from e
            logger.debug(f"No kubeconfig, connecting to {cluster.master_url} without credentials")

    if cluster.master_url:
        configuration.host = cluster.master_url

    if cluster.trust_certs:
        configuration.verify_ssl = False

    return client.ApiClient(configuration)


def watch_error(status: Optional[dict]) -> ApiException:
    """Exception for an ERROR watch frame carrying a Status instead of a workload."""
    status = status or {}
    return ApiException(status=status.get("code", 0), reason=status.get("message", "watch error"))

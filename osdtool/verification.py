"""Prepare an egress verification run for an AWS cluster's network."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

log = logging.getLogger(__name__)

NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY = "kubernetes.io/role/internal-elb"
SUPPORTED_PRODUCTS = ("rosa", "osd", "osdtrial")
DEFAULT_INSTANCE_TYPE = "t3.micro"
DEFAULT_TIMEOUT_SECONDS = 2.0

AmiLookup = Union[Mapping[str, str], Callable[[str], str]]


class VerificationError(Exception):
    """The egress verification cannot be prepared."""


class EgressAWSClient(Protocol):
    """The EC2 calls that egress verification needs, in the boto3 shape."""

    def describe_subnets(self, **kwargs: Any) -> Mapping[str, Any]:
        """Return {"Subnets": [...]} for the given filters."""

    def describe_security_groups(self, **kwargs: Any) -> Mapping[str, Any]:
        """Return {"SecurityGroups": [...]} for the given filters."""


@dataclass
class ProxyConfig:
    """Cluster-wide proxy settings for the verifier."""

    http_proxy: str = ""
    https_proxy: str = ""
    cacert: str = ""
    no_tls: bool = False


@dataclass
class ValidateEgressInput:
    """Everything the egress verifier needs to launch its probe."""

    subnet_id: str = ""
    cloud_image_id: str = ""
    instance_type: str = DEFAULT_INSTANCE_TYPE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    tags: dict[str, str] = field(default_factory=dict)
    security_group_id: str = ""


@dataclass
class ClusterInfo:
    """The parts of a cluster's description that verification relies on."""

    id: str = ""
    cloud_provider: str = ""
    product: str = ""
    infra_id: str = ""
    subnet_ids: list[str] = field(default_factory=list)
    private_link: bool = False
    http_proxy: str = ""
    https_proxy: str = ""
    additional_trust_bundle: str = ""

    @property
    def has_proxy(self) -> bool:
        """Report whether a cluster-wide proxy is configured."""
        return bool(self.http_proxy or self.https_proxy)


def _lookup_ami(ami_lookup: AmiLookup, region: str) -> str:
    if callable(ami_lookup):
        return ami_lookup(region) or ""
    return ami_lookup.get(region, "") or ""


def default_validate_egress_input(region: str, ami_lookup: AmiLookup) -> ValidateEgressInput:
    """Return the default verifier input for a region.

    ami_lookup maps a region to the verifier's machine image; a region
    without one is unsupported.
    """
    image = _lookup_ami(ami_lookup, region)
    if not image:
        raise VerificationError(f"unsupported region: {region}")
    return ValidateEgressInput(
        subnet_id="",
        cloud_image_id=image,
        instance_type=DEFAULT_INSTANCE_TYPE,
        timeout=DEFAULT_TIMEOUT_SECONDS,
        proxy=ProxyConfig(),
        tags={
            "osd-network-verifier": "owned",
            "red-hat-managed": "true",
            "Name": "osd-network-verifier",
        },
        security_group_id="",
    )


@dataclass
class EgressVerification:
    """Settings for verifying that a cluster can reach its required URLs.

    cluster_lookup resolves a cluster id to its description and
    client_factory returns an EC2 client and region for that cluster;
    both are needed only when cluster_id is given.
    """

    cluster_id: str = ""
    region: str = ""
    subnet_id: str = ""
    security_group_id: str = ""
    debug: bool = False
    ca_cert: str = ""
    no_tls: bool = False
    aws_client: EgressAWSClient | None = None
    cluster: ClusterInfo | None = None
    ami_lookup: AmiLookup = field(default_factory=dict)
    cluster_lookup: Callable[[str], ClusterInfo] | None = None
    client_factory: Callable[[ClusterInfo], tuple[EgressAWSClient, str]] | None = None

    @property
    def _cluster(self) -> ClusterInfo:
        return self.cluster if self.cluster is not None else ClusterInfo()

    @property
    def _client(self) -> EgressAWSClient:
        if self.aws_client is None:
            raise VerificationError("no AWS client configured")
        return self.aws_client

    def setup(self) -> str:
        """Resolve the cluster and AWS client; return the AWS region to use."""
        log.setLevel(logging.DEBUG if self.debug else logging.INFO)

        if self.cluster_id:
            log.debug("searching OCM for cluster: %s", self.cluster_id)
            if self.cluster_lookup is None or self.client_factory is None:
                raise VerificationError(
                    f"failed to get OCM cluster info for {self.cluster_id}: "
                    "no cluster lookup configured"
                )
            try:
                cluster = self.cluster_lookup(self.cluster_id)
            except Exception as err:
                raise VerificationError(
                    f"failed to get OCM cluster info for {self.cluster_id}: {err}"
                ) from err
            log.debug("cluster %s found from OCM: %s", self.cluster_id, cluster.id)
            self.cluster = cluster
            log.info("getting AWS credentials from backplane-api")
            client, region = self.client_factory(cluster)
            log.debug("retrieved AWS credentials from backplane-api")
            self.aws_client = client
            return region

        if not self.subnet_id or not self.security_group_id:
            raise VerificationError(
                "--subnet-id and --security-group are required when --cluster-id is not specified"
            )

        log.info(
            "[WARNING] no cluster-id specified, there is reduced validation around the "
            "security group, subnet, and proxy, causing inaccurate results"
        )
        log.info("using whatever default AWS credentials are locally available")
        region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or ""
        if self.region:
            log.info("overriding region with %s", self.region)
            region = self.region
        return region

    def generate_validate_egress_input(self, region: str) -> ValidateEgressInput:
        """Assemble the verifier input, detecting what it can from the cluster."""
        cluster = self.cluster
        if cluster is not None:
            if cluster.cloud_provider != "aws":
                raise VerificationError(f"only supports aws, got {cluster.cloud_provider}")
            if cluster.product not in SUPPORTED_PRODUCTS:
                raise VerificationError(
                    f"only supports rosa, osd, and osdtrial, got {cluster.product}"
                )

        try:
            egress_input = default_validate_egress_input(region, self.ami_lookup)
        except VerificationError as err:
            raise VerificationError(f"failed to assemble validate egress input: {err}") from err

        egress_input.proxy.no_tls = self.no_tls
        if self.ca_cert:
            with open(self.ca_cert, encoding="utf-8") as handle:
                egress_input.proxy.cacert = handle.read()

        if cluster is not None and cluster.has_proxy:
            egress_input.proxy.http_proxy = cluster.http_proxy
            egress_input.proxy.https_proxy = cluster.https_proxy
            if cluster.additional_trust_bundle and not self.ca_cert:
                raise VerificationError(
                    f"{self.cluster_id} has an additional trust bundle configured, "
                    "but no --cacert supplied"
                )

        egress_input.subnet_id = self.get_subnet_id()
        egress_input.security_group_id = self.get_security_group_id()
        return egress_input

    def get_subnet_id(self) -> str:
        """Return a private subnet id, from the override or from the cluster."""
        if self.subnet_id:
            log.info("using manually specified subnet-id: %s", self.subnet_id)
            return self.subnet_id

        cluster = self._cluster
        infra_id = cluster.infra_id
        if not cluster.subnet_ids:
            log.info(
                "searching for subnets by tags: kubernetes.io/cluster/%s=owned and %s=",
                infra_id,
                NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY,
            )
            try:
                resp = self._client.describe_subnets(
                    Filters=[
                        {"Name": f"tag:kubernetes.io/cluster/{infra_id}", "Values": ["owned"]},
                        {"Name": "tag-key", "Values": [NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY]},
                    ]
                )
            except VerificationError:
                raise
            except Exception as err:
                raise VerificationError(
                    f"failed to find private subnets for {infra_id}: {err}"
                ) from err
            subnets = resp.get("Subnets") or []
            if not subnets:
                raise VerificationError(
                    f"found 0 subnets with kubernetes.io/cluster/{infra_id}=owned and "
                    f"{infra_id}, consider the --subnet-id flag"
                )
            subnet_id = subnets[0]["SubnetId"]
            log.info("using subnet-id: %s", subnet_id)
            return subnet_id

        if cluster.private_link:
            first = cluster.subnet_ids[0]
            log.info("detected BYOVPC PrivateLink cluster, using first subnet from OCM: %s", first)
            return first

        raise VerificationError(
            "unable to determine which non-PrivateLink BYOVPC subnets are private yet, "
            "please check manually and provide the --subnet-id flag"
        )

    def get_security_group_id(self) -> str:
        """Return the master security group id, from the override or from AWS."""
        if self.security_group_id:
            log.info("using manually specified security-group-id: %s", self.security_group_id)
            return self.security_group_id

        infra_id = self._cluster.infra_id
        log.info(
            "searching for security group by tags: kubernetes.io/cluster/%s=owned "
            "and Name=%s-master-sg",
            infra_id,
            infra_id,
        )
        try:
            resp = self._client.describe_security_groups(
                Filters=[
                    {"Name": "tag:Name", "Values": [f"{infra_id}-master-sg"]},
                    {"Name": f"tag:kubernetes.io/cluster/{infra_id}", "Values": ["owned"]},
                ]
            )
        except VerificationError:
            raise
        except Exception as err:
            raise VerificationError(
                f"failed to find master security group for {infra_id}: {err}"
            ) from err
        groups = resp.get("SecurityGroups") or []
        if not groups:
            raise VerificationError(
                f"failed to find any master security groups by tag: "
                f"kubernetes.io/cluster/{infra_id}=owned and Name=={infra_id}-master-sg"
            )
        group_id = groups[0]["GroupId"]
        log.info("using security-group-id: %s", group_id)
        return group_id
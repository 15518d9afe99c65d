"""
Lifecycle operations of the `CLOUDFLARE::DNS::Record` resource.

Every operation is a single request/response cycle against the Cloudflare API
and returns a result object: failures are reported as data with an
`OperationErrorCode`, never raised, so that the orchestrator can apply its own
retry policy. Nothing here retries.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, Callable

from .client import CloudflareDNSClient, DNSProvider
from .config import RawPayload, TargetConfig, parse_target_config
from .errors import InvalidRequestError, OperationErrorCode, classify_error, is_not_found, is_rate_limited
from .mapper import from_provider_response, to_provider_create, to_provider_update
from .properties import DNSRecordProperties, parse_properties, serialize_properties, validate_properties

__all__ = (
    "RESOURCE_TYPE",
    "Operation",
    "OperationStatus",
    "CreateRequest",
    "ReadRequest",
    "UpdateRequest",
    "DeleteRequest",
    "StatusRequest",
    "ListRequest",
    "ProgressResult",
    "ReadResult",
    "ListResult",
    "RateLimitConfig",
    "LabelConfig",
    "CloudflareDNSPlugin",
)

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "CLOUDFLARE::DNS::Record"

DEFAULT_PAGE_SIZE = 100

# Cloudflare allows 1200 requests per 5 minutes
MAX_REQUESTS_PER_SECOND = 4

ClientFactory = Callable[[TargetConfig], DNSProvider]


class Operation(StrEnum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    CHECK_STATUS = "CheckStatus"


class OperationStatus(StrEnum):
    SUCCESS = "Success"
    FAILURE = "Failure"


def _to_dict(obj) -> dict[str, Any]:
    return {k: v for k, v in asdict(obj).items() if v is not None}


# Requests


@dataclass
class CreateRequest:
    target_config: RawPayload
    properties: RawPayload


@dataclass
class ReadRequest:
    target_config: RawPayload
    native_id: str
    resource_type: str = RESOURCE_TYPE


@dataclass
class UpdateRequest:
    target_config: RawPayload
    native_id: str
    desired_properties: RawPayload
    # When given, used to reject changes to create-only fields
    prior_properties: RawPayload | None = None


@dataclass
class DeleteRequest:
    target_config: RawPayload
    native_id: str


@dataclass
class StatusRequest:
    native_id: str | None = None


@dataclass
class ListRequest:
    target_config: RawPayload
    page_token: str | None = None
    page_size: int = 0


# Results


@dataclass
class ProgressResult:
    operation: Operation
    status: OperationStatus
    native_id: str | None = None
    resource_properties: str | None = None
    error_code: OperationErrorCode | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class ReadResult:
    resource_type: str = RESOURCE_TYPE
    properties: str | None = None
    error_code: OperationErrorCode | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class ListResult:
    native_ids: list[str] = field(default_factory=list)
    next_page_token: str | None = None
    error_code: OperationErrorCode | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


# Capabilities


@dataclass(frozen=True)
class RateLimitConfig:
    scope: str
    max_requests_per_second: int


@dataclass(frozen=True)
class LabelConfig:
    default_query: str
    resource_overrides: dict[str, str] = field(default_factory=dict)


def _parse_page_token(page_token: str | None) -> int:
    """Page tokens are 1-based page numbers; anything unreadable restarts at page 1."""
    if not page_token:
        return 1
    try:
        page = int(page_token)
    except ValueError:
        return 1
    return page if page >= 1 else 1


def _failure(operation: Operation, error_code: OperationErrorCode, message: str) -> ProgressResult:
    return ProgressResult(
        operation=operation,
        status=OperationStatus.FAILURE,
        error_code=error_code,
        message=message,
    )


def _log_provider_error(message: str, error: Exception) -> OperationErrorCode:
    error_code = classify_error(error)
    if is_rate_limited(error):
        logger.warning(f"{message}: throttled by Cloudflare (retry after: {getattr(error, 'retry_after', None)})")
    elif error_code == OperationErrorCode.INTERNAL_FAILURE:
        logger.error(f"{message}: {error}", exc_info=error)
    else:
        logger.warning(f"{message}: {error} ({error_code})")
    return error_code


@dataclass
class CloudflareDNSPlugin:
    """
    Cloudflare DNS record adapter for the orchestrator.

    `client_factory` builds the provider client for a target, defaults to a
    `CloudflareDNSClient` using the target's API token.
    """

    client_factory: ClientFactory | None = None
    # Seconds allowed for each outbound call
    timeout: float | None = None

    def _get_client(self, config: TargetConfig) -> DNSProvider:
        if self.client_factory is not None:
            return self.client_factory(config)
        return CloudflareDNSClient(token=config.api_token, timeout=self.timeout)

    # Capabilities

    def rate_limit(self) -> RateLimitConfig:
        return RateLimitConfig(scope="namespace", max_requests_per_second=MAX_REQUESTS_PER_SECOND)

    def discovery_filters(self) -> list[dict]:
        """No discovered record is excluded."""
        return []

    def label_config(self) -> LabelConfig:
        return LabelConfig(default_query="$.name")

    # CRUD

    async def create(self, request: CreateRequest) -> ProgressResult:
        try:
            config = parse_target_config(request.target_config)
        except InvalidRequestError as e:
            return _failure(Operation.CREATE, OperationErrorCode.INVALID_REQUEST, f"Invalid target config: {e}")

        try:
            props = parse_properties(request.properties)
            validate_properties(props)
            provider_request = to_provider_create(props, config.zone_id, zone_name=config.zone_name)
        except InvalidRequestError as e:
            return _failure(Operation.CREATE, OperationErrorCode.INVALID_REQUEST, f"Invalid properties: {e}")

        try:
            async with self._get_client(config) as client:
                record = await client.create_dns_record(provider_request.zone_id, provider_request.body)
        except Exception as e:
            error_code = _log_provider_error(f"Failed to create {props.record_type} record {props.name!r}", e)
            return _failure(Operation.CREATE, error_code, f"Failed to create DNS record: {e}")

        logger.info(f"Created {props.record_type} record {props.name!r} ({record['id']})")
        # Reported with the declared name, not the FQDN Cloudflare echoes back
        return ProgressResult(
            operation=Operation.CREATE,
            status=OperationStatus.SUCCESS,
            native_id=record["id"],
            resource_properties=serialize_properties(props).decode(),
        )

    async def read(self, request: ReadRequest) -> ReadResult:
        try:
            config = parse_target_config(request.target_config)
        except InvalidRequestError as e:
            return ReadResult(
                resource_type=request.resource_type,
                error_code=OperationErrorCode.INVALID_REQUEST,
                message=f"Invalid target config: {e}",
            )

        try:
            async with self._get_client(config) as client:
                zone_name = config.zone_name
                if zone_name is None:
                    try:
                        zone_name = (await client.get_zone(config.zone_id))["name"]
                    except Exception as e:
                        # A missing zone is a configuration problem, not a deleted record
                        error_code = _log_provider_error(f"Failed to get zone {config.zone_id}", e)
                        if error_code == OperationErrorCode.NOT_FOUND:
                            error_code = OperationErrorCode.INVALID_REQUEST
                        return ReadResult(
                            resource_type=request.resource_type,
                            error_code=error_code,
                            message=f"Failed to get zone details: {e}",
                        )
                record = await client.get_dns_record(config.zone_id, request.native_id)
        except Exception as e:
            error_code = _log_provider_error(f"Failed to read record {request.native_id}", e)
            return ReadResult(
                resource_type=request.resource_type,
                error_code=error_code,
                message=f"Failed to read DNS record: {e}",
            )

        props = from_provider_response(record, zone_name)
        return ReadResult(resource_type=request.resource_type, properties=serialize_properties(props).decode())

    async def update(self, request: UpdateRequest) -> ProgressResult:
        try:
            config = parse_target_config(request.target_config)
        except InvalidRequestError as e:
            return _failure(Operation.UPDATE, OperationErrorCode.INVALID_REQUEST, f"Invalid target config: {e}")

        try:
            props = parse_properties(request.desired_properties)
            validate_properties(props)
            if request.prior_properties is not None:
                _check_create_only(parse_properties(request.prior_properties), props)
            provider_request = to_provider_update(
                props, request.native_id, config.zone_id, zone_name=config.zone_name
            )
        except InvalidRequestError as e:
            return _failure(Operation.UPDATE, OperationErrorCode.INVALID_REQUEST, f"Invalid properties: {e}")

        try:
            async with self._get_client(config) as client:
                await client.overwrite_dns_record(
                    provider_request.zone_id,
                    request.native_id,
                    provider_request.body,
                )
        except Exception as e:
            error_code = _log_provider_error(f"Failed to update record {request.native_id}", e)
            return _failure(Operation.UPDATE, error_code, f"Failed to update DNS record: {e}")

        logger.info(f"Updated {props.record_type} record {props.name!r} ({request.native_id})")
        return ProgressResult(
            operation=Operation.UPDATE,
            status=OperationStatus.SUCCESS,
            native_id=request.native_id,
            resource_properties=serialize_properties(props).decode(),
        )

    async def delete(self, request: DeleteRequest) -> ProgressResult:
        try:
            config = parse_target_config(request.target_config)
        except InvalidRequestError as e:
            return _failure(Operation.DELETE, OperationErrorCode.INVALID_REQUEST, f"Invalid target config: {e}")

        try:
            async with self._get_client(config) as client:
                await client.delete_dns_record(config.zone_id, request.native_id)
        except Exception as e:
            if is_not_found(e):
                logger.info(f"Record {request.native_id} already deleted")
                return ProgressResult(operation=Operation.DELETE, status=OperationStatus.SUCCESS)
            error_code = _log_provider_error(f"Failed to delete record {request.native_id}", e)
            return _failure(Operation.DELETE, error_code, f"Failed to delete DNS record: {e}")

        logger.info(f"Deleted record {request.native_id}")
        return ProgressResult(operation=Operation.DELETE, status=OperationStatus.SUCCESS)

    async def status(self, request: StatusRequest) -> ProgressResult:
        """DNS changes complete synchronously on Cloudflare, there is nothing to poll."""
        return ProgressResult(
            operation=Operation.CHECK_STATUS,
            status=OperationStatus.SUCCESS,
            native_id=request.native_id,
        )

    async def list(self, request: ListRequest) -> ListResult:
        """
        List one page of record IDs of the zone, for discovery.

        The next page token is returned when Cloudflare reports more pages, or,
        when it does not report a page count, when the page is full.
        """
        try:
            config = parse_target_config(request.target_config)
        except InvalidRequestError as e:
            return ListResult(error_code=OperationErrorCode.INVALID_REQUEST, message=f"Invalid target config: {e}")

        page_size = request.page_size if request.page_size > 0 else DEFAULT_PAGE_SIZE
        page = _parse_page_token(request.page_token)

        try:
            async with self._get_client(config) as client:
                records_page = await client.list_dns_records(config.zone_id, page=page, per_page=page_size)
        except Exception as e:
            error_code = _log_provider_error(f"Failed to list records of zone {config.zone_id}", e)
            return ListResult(error_code=error_code, message=f"Failed to list DNS records: {e}")

        native_ids = [record["id"] for record in records_page["result"]]

        result_info = records_page.get("result_info") or {}
        total_pages = result_info.get("total_pages")
        if total_pages is not None:
            has_more = page < total_pages
        else:
            has_more = len(native_ids) == page_size

        return ListResult(native_ids=native_ids, next_page_token=str(page + 1) if has_more else None)


def _check_create_only(prior: DNSRecordProperties, desired: DNSRecordProperties):
    for key in ("record_type", "name"):
        if getattr(prior, key) != getattr(desired, key):
            raise InvalidRequestError(f"{key} cannot be updated in place, the record must be replaced")

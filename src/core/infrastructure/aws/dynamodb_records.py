"""DynamoDB-backed implementation of EntityRecordRepository."""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter, DynamoDBAdapterProtocol
from core.models.entity import EntityType
from core.models.errors import (
    ForbiddenError,
    NotFoundError,
    RecordOperationFailedError,
    ValidationError,
)
from core.repositories.record_repository import EntityRecordRepository
from core.utils.constants import (
    ENV_BUY_ORDERS_TABLE_NAME,
    ENV_LISTINGS_TABLE_NAME,
    ENV_PROFILES_TABLE_NAME,
    ERROR_CODE_RECORD_CREATE_FAILED,
    ERROR_CODE_RECORD_DELETE_FAILED,
    ERROR_CODE_RECORD_FETCH_FAILED,
    ERROR_CODE_RECORD_LIST_FAILED,
    ERROR_CODE_RECORD_UPDATE_FAILED,
    MAX_LIMIT,
    MIN_LIMIT,
    OWNER_INDEX_NAME,
)
from core.utils.time import utc_now_iso

Record = dict[str, Any]

logger = Logger(UTC=True)

_CONDITION_FAILED = "ConditionalCheckFailedException"


@dataclass(frozen=True)
class TableSpec:
    env_var: str
    owner_field: str


TABLES: Mapping[EntityType, TableSpec] = {
    EntityType.SALE: TableSpec(ENV_LISTINGS_TABLE_NAME, "seller_id"),
    EntityType.WANT_TO_BUY: TableSpec(ENV_BUY_ORDERS_TABLE_NAME, "user_id"),
    EntityType.AVATAR: TableSpec(ENV_PROFILES_TABLE_NAME, "id"),
}


def to_dynamo(value: Any) -> Any:
    """Convert floats to Decimal, recursively, as boto3 requires."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert Decimal back to int/float so records stay JSON-serializable."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class DynamoDBRecords(EntityRecordRepository):
    """Entity records for one entity type, stored in DynamoDB.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(
        self,
        entity_type: EntityType,
        adapter: DynamoDBAdapterProtocol | None = None,
    ) -> None:
        table = TABLES[entity_type]
        self.entity_type = entity_type
        self.owner_field = table.owner_field
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(table.env_var)

    def insert_record(self, *, item: Record) -> Record:
        entity_id = item.get("id")
        owner_id = item.get(self.owner_field)

        if not entity_id or not isinstance(entity_id, str):
            raise ValidationError(message="Record must contain a non-empty 'id'")

        if not owner_id or not isinstance(owner_id, str):
            raise ValidationError(
                message=f"Record must contain a non-empty '{self.owner_field}'",
                details={"id": entity_id},
            )

        logger.debug(
            "Inserting record",
            extra={"entity_type": self.entity_type.value, "id": entity_id},
        )

        try:
            self._db.put_item(
                item=to_dynamo(item),
                ConditionExpression="attribute_not_exists(id)",
            )
        except ClientError as exc:
            logger.error(
                "DynamoDB put_item failed",
                extra={"id": entity_id, "code": _error_code(exc)},
            )
            raise RecordOperationFailedError(
                message="Unable to save this record at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"id": entity_id},
            ) from exc

        logger.info("Record inserted", extra={"entity_type": self.entity_type.value, "id": entity_id})
        return item

    def fetch_record(self, *, entity_id: str) -> Record | None:
        logger.debug("Fetching record", extra={"id": entity_id})

        try:
            response = self._db.get_item(key={"id": entity_id})
        except ClientError as exc:
            logger.error("DynamoDB get_item failed", extra={"id": entity_id})
            raise RecordOperationFailedError(
                message="Unable to retrieve this record",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"id": entity_id},
            ) from exc

        item = response.get("Item")
        if item is None:
            return None

        if not isinstance(item, dict):
            raise RecordOperationFailedError(
                message="Invalid record format",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"id": entity_id},
            )

        return from_dynamo(item)

    def list_owned(self, *, owner_id: str, limit: int) -> list[Record]:
        if limit < MIN_LIMIT or limit > MAX_LIMIT:
            raise ValidationError(
                message=f"Limit must be between {MIN_LIMIT} and {MAX_LIMIT}",
                details={"limit": limit},
            )

        try:
            response = self._db.query(
                IndexName=OWNER_INDEX_NAME,
                KeyConditionExpression=Key(self.owner_field).eq(owner_id),
                ScanIndexForward=False,
                Limit=limit,
            )
        except ClientError as exc:
            logger.error("DynamoDB query failed", extra={"owner_id": owner_id})
            raise RecordOperationFailedError(
                message="Unable to list records at this time",
                error_code=ERROR_CODE_RECORD_LIST_FAILED,
                details={"owner_id": owner_id},
            ) from exc

        items = response.get("Items", [])
        return [from_dynamo(item) for item in items]

    def update_record(self, *, entity_id: str, owner_id: str, changes: Record) -> Record:
        changes = {k: v for k, v in changes.items() if k not in ("id", self.owner_field)}
        changes["updated_at"] = utc_now_iso()

        names: dict[str, str] = {"#owner": self.owner_field}
        values: dict[str, Any] = {":owner": owner_id}
        set_parts: list[str] = []
        remove_parts: list[str] = []

        for position, (field, value) in enumerate(changes.items()):
            names[f"#f{position}"] = field
            if value is None:
                remove_parts.append(f"#f{position}")
            else:
                values[f":v{position}"] = to_dynamo(value)
                set_parts.append(f"#f{position} = :v{position}")

        expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)

        logger.debug(
            "Updating record",
            extra={"id": entity_id, "fields": sorted(changes)},
        )

        try:
            response = self._db.update_item(
                key={"id": entity_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(id) AND #owner = :owner",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _error_code(exc) == _CONDITION_FAILED:
                self._raise_access_error(entity_id, owner_id, exc)

            logger.error("DynamoDB update_item failed", extra={"id": entity_id})
            raise RecordOperationFailedError(
                message="Unable to update this record at this time",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"id": entity_id},
            ) from exc

        logger.info("Record updated", extra={"id": entity_id})
        return from_dynamo(response.get("Attributes", {}))

    def delete_record(self, *, entity_id: str, owner_id: str) -> None:
        logger.debug("Deleting record", extra={"id": entity_id})

        try:
            self._db.delete_item(
                key={"id": entity_id},
                ConditionExpression="attribute_exists(id) AND #owner = :owner",
                ExpressionAttributeNames={"#owner": self.owner_field},
                ExpressionAttributeValues={":owner": owner_id},
            )
        except ClientError as exc:
            if _error_code(exc) == _CONDITION_FAILED:
                self._raise_access_error(entity_id, owner_id, exc)

            logger.error("DynamoDB delete_item failed", extra={"id": entity_id})
            raise RecordOperationFailedError(
                message="Unable to delete this record at this time",
                error_code=ERROR_CODE_RECORD_DELETE_FAILED,
                details={"id": entity_id},
            ) from exc

        logger.info("Record deleted", extra={"id": entity_id})

    def find_by_field(self, *, index_name: str, field: str, value: str) -> list[Record]:
        try:
            response = self._db.query(
                IndexName=index_name,
                KeyConditionExpression=Key(field).eq(value),
            )
        except ClientError as exc:
            logger.error(
                "DynamoDB index query failed",
                extra={"index": index_name, "field": field},
            )
            raise RecordOperationFailedError(
                message="Unable to look up records at this time",
                error_code=ERROR_CODE_RECORD_LIST_FAILED,
                details={"index": index_name},
            ) from exc

        return [from_dynamo(item) for item in response.get("Items", [])]

    def _raise_access_error(self, entity_id: str, owner_id: str, exc: ClientError) -> None:
        """Tell a missing record apart from one owned by someone else."""
        existing = self.fetch_record(entity_id=entity_id)

        if existing is None:
            raise NotFoundError(
                message="Record not found",
                details={"id": entity_id},
            ) from exc

        logger.warning(
            "Write rejected for non-owner",
            extra={"id": entity_id, "caller_id": owner_id},
        )
        raise ForbiddenError(
            message="You can only modify your own records",
            details={"id": entity_id},
        ) from exc

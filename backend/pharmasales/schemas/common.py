from typing import Any, Dict, List, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, ValidationError

from pharmasales.core.exceptions import BusinessError

M = TypeVar("M", bound=BaseModel)


class APIModel(BaseModel):
    """Accepts the public (aliased) keys or the column names; dumps by alias."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, use_enum_values=True)


def error_messages(exc: ValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return messages


def validate_payload(schema: Type[M], payload: Any) -> M:
    """Validate a raw dict, translating pydantic errors into a 400."""
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise BusinessError.validation(error_messages(exc))


def dump(schema: Type[BaseModel], obj: Any) -> dict:
    """Serialize an ORM row through a response schema using the public keys."""
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def public_key(schema: Type[BaseModel], field_name: str) -> str:
    field = schema.model_fields.get(field_name)
    if field is None:
        return field_name
    return field.serialization_alias or field.alias or field_name


def canonical_payload(schema: Type[BaseModel], payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rename every accepted spelling of a field (column name, alias, alias
    choices) to the key `dump` produces, so a partial update can be laid
    over a serialized row without two spellings of the same field.
    """
    lookup = {}
    for name, field in schema.model_fields.items():
        key = public_key(schema, name)
        lookup[name] = key
        if field.alias:
            lookup[field.alias] = key
        if isinstance(field.validation_alias, str):
            lookup[field.validation_alias] = key
        elif isinstance(field.validation_alias, AliasChoices):
            for choice in field.validation_alias.choices:
                if isinstance(choice, str):
                    lookup[choice] = key
    return {lookup.get(k, k): v for k, v in payload.items()}

"""Deferred validation for legacy bodies checked for ownership first."""
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from reconstruct.core.errors import ValidationFailure

ModelT = TypeVar("ModelT", bound=BaseModel)

IDENTITY_FIELDS = {"user_name", "email"}


def describe_errors(exc) -> str:
    """One line per pydantic error: `loc.path: message`."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def validate_fields(model: type[ModelT], values: dict[str, Any]) -> ModelT:
    """Validate a raw body's payload fields, raising ValidationFailure (400) on bad input."""
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise ValidationFailure("Invalid request", describe_errors(exc)) from None


class OwnedBody(BaseModel):
    """Body naming the user it acts for; every field is left unchecked until ownership passes."""

    user_name: Any = None
    email: Any = None

    def payload(self, model: type[ModelT]) -> ModelT:
        return validate_fields(model, self.model_dump(exclude=IDENTITY_FIELDS))

"""PydanticValidator: leverages Pydantic model validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .failure import ValidationFailure
from .rules import Validator

if TYPE_CHECKING:
    from ..cqrs.cancellation import CancellationToken


class PydanticValidator(Validator[Any]):
    """Validates requests against a Pydantic schema.

    With a *schema*, the request content is validated through that model
    (useful for stricter input rules than the request type itself declares).
    Without one, the request is re-validated through its own class. Every
    ``ValidationError`` entry becomes a
    :class:`~cqrs_ddd_pipeline.validation.failure.ValidationFailure` whose
    property path is the dotted error location.
    """

    def __init__(self, schema: type[BaseModel] | None = None) -> None:
        self._schema = schema

    @property
    def name(self) -> str:
        if self._schema is None:
            return type(self).__name__
        return f"{type(self).__name__}[{self._schema.__name__}]"

    async def validate(
        self, request: Any, cancellation: CancellationToken
    ) -> list[ValidationFailure]:
        cancellation.raise_if_cancelled()
        schema = self._schema or type(request)
        if not isinstance(request, BaseModel) or not issubclass(schema, BaseModel):
            return []

        data = request.content() if hasattr(request, "content") else request.model_dump()
        try:
            schema.model_validate(data)
        except PydanticValidationError as exc:
            failures: list[ValidationFailure] = []
            for error in exc.errors():
                loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
                msg = error.get("msg", "validation error")
                failures.append(ValidationFailure(loc, msg))
            return failures
        return []

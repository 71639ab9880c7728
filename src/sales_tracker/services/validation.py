"""Form validation on top of the pydantic form models.

Models run before any remote call. Each field reports at most one error,
translated from the pydantic error type into the message shown on the page.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeVar

from pydantic import ValidationError

from sales_tracker.forms import FormModel

FormValues = Mapping[str, object]
FormT = TypeVar("FormT", bound=FormModel)

INVALID = "invalid"
DEFAULT_MESSAGE = "Valor inválido"

FIELD_MESSAGES: dict[str, dict[str, str]] = {
    "email": {"missing": "Email é obrigatório", INVALID: "Email inválido"},
    "password": {
        "missing": "Senha é obrigatória",
        INVALID: "A senha deve ter pelo menos 6 caracteres",
    },
    "full_name": {
        "missing": "Nome completo é obrigatório",
        INVALID: "O nome deve ter pelo menos 3 caracteres",
    },
    "confirm_password": {
        "missing": "Confirmação de senha é obrigatória",
        INVALID: "As senhas não conferem",
    },
    "name": {
        "missing": "Nome é obrigatório",
        INVALID: "O nome deve ter pelo menos 2 caracteres",
    },
    "client_id": {"missing": "Cliente é obrigatório", INVALID: "Cliente inválido"},
    "sale_date": {"missing": "Data é obrigatória", INVALID: "Data inválida"},
}


@dataclass(frozen=True)
class FieldError:
    """Validation message bound to a form field."""

    field: str
    message: str


class ValidationFailed(ValueError):
    """Raised when a form does not pass its model."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))
        self.errors = errors

    def for_field(self, name: str) -> str | None:
        for error in self.errors:
            if error.field == name:
                return error.message
        return None


def parse_form(model: type[FormT], values: FormValues) -> FormT:
    """Validate raw form values, raising ValidationFailed with field errors."""
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise ValidationFailed(field_errors(exc)) from exc


def field_errors(exc: ValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    seen: set[str] = set()
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else ""
        if name in seen:
            continue
        seen.add(name)
        errors.append(FieldError(name, _message(name, error["type"])))
    return errors


def _message(name: str, error_type: str) -> str:
    messages = FIELD_MESSAGES.get(name, {})
    if error_type == "missing":
        return messages.get("missing", DEFAULT_MESSAGE)
    return messages.get(INVALID, DEFAULT_MESSAGE)

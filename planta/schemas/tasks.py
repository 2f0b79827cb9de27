from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ValidationError
from ..services.areas import AreaTarget
from ..services.checklist import coerce_flag, normalize_label


def normalize_vin(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip().upper()
    return value or None


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class StartTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    usuario_id: int
    area: str
    color: Optional[str] = None
    paint_code: Optional[str] = Field(default=None, alias="RAL")
    bastidor: Optional[str] = None
    checks: Optional[Dict[str, Any]] = None

    @field_validator("color", "paint_code", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return clean_text(v)

    @field_validator("bastidor", mode="before")
    @classmethod
    def vin_upper(cls, v):
        return normalize_vin(v)


# Wire key -> reserved column
_RESERVED_KEYS = {
    "bastidor": "vin",
    "vin": "vin",
    "color": "color",
    "RAL": "paint_code",
    "ral": "paint_code",
    "paint_code": "paint_code",
}
# Written only through the lifecycle operations
_PROTECTED_KEYS = {"id", "estado", "state", "fecha_inicio", "start_time", "fecha_fin", "end_time"}


class AreaUpdate(BaseModel):
    """Partial update of one area record. Only fields explicitly set are written."""

    vin: Optional[str] = None
    color: Optional[str] = None
    paint_code: Optional[str] = None
    checklist: Dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, target: AreaTarget, payload: Dict[str, Any]) -> "AreaUpdate":
        values: Dict[str, Any] = {}
        checklist: Dict[str, bool] = {}
        errors: Dict[str, list] = {}

        items = list((payload or {}).items())
        nested = (payload or {}).get("checks")
        if nested is not None:
            if not isinstance(nested, dict):
                errors.setdefault("checks", []).append("Debe ser un objeto")
            else:
                items = [(k, v) for k, v in items if k != "checks"] + list(nested.items())

        for key, value in items:
            if not isinstance(key, str):
                continue
            if key in _PROTECTED_KEYS:
                errors.setdefault(key, []).append("Campo no editable")
                continue
            column = _RESERVED_KEYS.get(key)
            if column is not None:
                if not target.has_column(column):
                    errors.setdefault(key, []).append(f"El área {target.key} no tiene este campo")
                    continue
                values[column] = normalize_vin(value) if column == "vin" else clean_text(value)
                continue
            field_name = normalize_label(key)
            if field_name in target.checklist_fields:
                checklist[field_name] = bool(coerce_flag(value))
            else:
                errors.setdefault(key, []).append("Campo desconocido")

        if errors:
            raise ValidationError(message="Campos no válidos", errors=errors)
        return cls(checklist=checklist, **values)

    def is_empty(self) -> bool:
        return not self.model_fields_set.difference({"checklist"}) and not self.checklist

    def to_columns(self) -> Dict[str, Any]:
        columns: Dict[str, Any] = {}
        for name in ("vin", "color", "paint_code"):
            if name in self.model_fields_set:
                columns[name] = getattr(self, name)
        for name, flag in self.checklist.items():
            columns[name] = 1 if flag else 0
        return columns

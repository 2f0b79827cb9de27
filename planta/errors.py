"""
Domain errors raised by the services and mapped to HTTP responses in main.py.

    raise ValidationError("usuario_id", "El usuario no existe")
    raise InvalidArea("soldadura")
    raise NotFound("tareas_chasis", 42)
    raise LockedByOther("chasis", 42, owner_id=7)
"""
from typing import Dict, List, Optional


class PlantaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"status": "error", "message": self.message}


class ValidationError(PlantaError):
    status_code = 422

    def __init__(self, field: Optional[str] = None, message: str = "Validation failed", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors: Dict[str, List[str]] = dict(errors or {})
        if field:
            self.errors.setdefault(field, []).append(message)

    def to_dict(self) -> dict:
        return {"status": "error", "message": self.message, "errors": self.errors}


class InvalidArea(ValidationError):
    status_code = 400

    def __init__(self, area: Optional[str]):
        super().__init__("area", "Área no válida")
        self.message = "Área no válida"
        self.area = area


class NotFound(PlantaError):
    status_code = 404

    def __init__(self, entity: str, entity_id=None):
        if entity_id is not None:
            message = f"{entity} {entity_id} no encontrado"
        else:
            message = f"{entity} no encontrado"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class LockedByOther(PlantaError):
    """The pending task for this VIN belongs to another operator."""

    status_code = 423

    def __init__(self, area: str, record_id: int, owner_id: int):
        super().__init__("La tarea pendiente pertenece a otro usuario")
        self.area = area
        self.record_id = record_id
        self.owner_id = owner_id

    def to_dict(self) -> dict:
        return {
            "status": "locked_by_other",
            "area": self.area,
            "id_area": int(self.record_id),
            "owner_id": int(self.owner_id),
        }

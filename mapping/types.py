from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

# (сырое значение, весь payload) -> значение для amoCRM или None
Transform = Callable[[Any, Dict[str, Any]], Any]


class SourceKind(str, Enum):
    PATH = "path"
    STATIC = "static"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Правило получения одного поля amoCRM.

    - PATH: значение берётся из payload по path, затем transform (если есть)
    - STATIC: значение из настроек, подставленное при сборке маппинга
    - MULTIPLE: transform сам собирает значение из нескольких мест payload
    """

    source: SourceKind
    path: Optional[str] = None
    value: Any = None
    transform: Optional[Transform] = None
    default: Any = None
    required: bool = False
    setting: Optional[str] = None  # переменная окружения, откуда пришло static-значение

    def __post_init__(self):
        if self.source is SourceKind.PATH and not self.path:
            raise ValueError("path обязателен для источника PATH")
        if self.source is SourceKind.MULTIPLE and self.transform is None:
            raise ValueError("transform обязателен для источника MULTIPLE")

    @classmethod
    def from_path(cls, path: str, transform: Optional[Transform] = None, default: Any = None) -> "FieldDescriptor":
        return cls(SourceKind.PATH, path=path, transform=transform, default=default)

    @classmethod
    def static(cls, value: Any, required: bool = False, setting: Optional[str] = None) -> "FieldDescriptor":
        return cls(SourceKind.STATIC, value=value, required=required, setting=setting)

    @classmethod
    def multiple(cls, transform: Transform) -> "FieldDescriptor":
        return cls(SourceKind.MULTIPLE, transform=transform)


@dataclass(frozen=True)
class EntityMapping:
    """Упорядоченный набор правил для одной сущности amoCRM (contact / lead)"""

    name: str
    fields: Dict[str, FieldDescriptor] = field(default_factory=dict)

    def items(self) -> Iterator[Tuple[str, FieldDescriptor]]:
        return iter(self.fields.items())


@dataclass(frozen=True)
class FieldRef:
    """
    Ссылка на поле amoCRM в custom_fields_values:
    либо числовой field_id (кастомное поле), либо field_code (PHONE, EMAIL).
    """

    field_id: Optional[int] = None
    field_code: Optional[str] = None

    def __post_init__(self):
        if (self.field_id is None) == (self.field_code is None):
            raise ValueError("Нужен ровно один из field_id / field_code")

    def as_entry_key(self) -> Dict[str, Any]:
        if self.field_id is not None:
            return {"field_id": self.field_id}
        return {"field_code": self.field_code}

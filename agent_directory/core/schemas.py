from typing import Any, ClassVar

from pydantic import BaseModel, model_validator


class PartialUpdate(BaseModel):
    """PATCH body. Omitted fields are left alone; fields in `non_nullable` may not be sent as null."""
    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = [name for name in cls.non_nullable if name in data and data[name] is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} may not be null")
        return data

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """對外 JSON 使用 camelCase，程式內部使用 snake_case"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UpdateModel(CamelModel):
    """部分更新：只接受明列的欄位"""

    model_config = ConfigDict(extra="forbid")

from typing import Optional
from bson import ObjectId
from pydantic import AliasChoices, BaseModel, BeforeValidator, Field
from pydantic.alias_generators import to_camel
from typing import Annotated

# Helper to map MongoDB _id to id
PyObjectId = Annotated[str, BeforeValidator(str)]

class CamelModel(BaseModel):
    """
    Request/response bodies are camelCase on the wire and snake_case in
    Python and in MongoDB.
    """
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True

class MongoBaseModel(CamelModel):
    id: Optional[PyObjectId] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="id",
    )

def to_object_id(value) -> Optional[ObjectId]:
    """Parse a path/body id; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None

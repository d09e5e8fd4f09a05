from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..utils.config import NAME_MAX_LENGTH


def clean_location_name(value: str | None) -> str:
    if value is None:
        raise ValueError("Location name is required")
    clean = value.strip()
    if not clean:
        raise ValueError("Location name is required")
    if len(clean) > NAME_MAX_LENGTH:
        raise ValueError(f"Location name must be at most {NAME_MAX_LENGTH} characters")
    return clean


def _camel_field(camel: str, snake: str, default=None):
    # camelCase on the wire, snake_case accepted on input
    return Field(
        default=default,
        validation_alias=AliasChoices(camel, snake),
        serialization_alias=camel,
    )


def _parent_id_field():
    return _camel_field("parentId", "parent_id")


class LocationRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class Location(BaseModel):
    id: int
    name: str
    description: str | None = None
    parent_id: int | None = _parent_id_field()

    class Config:
        from_attributes = True


class LocationSummary(Location):
    """
    One row of GET /api/locations: the location plus its immediate
    neighbours in the tree.
    """
    parent: LocationRef | None = None
    children: list[LocationRef] = []


class LocationDetail(LocationSummary):
    breadcrumb: list[LocationRef] = []
    box_count: int = _camel_field("boxCount", "box_count", 0)
    item_count: int = _camel_field("itemCount", "item_count", 0)


class HierarchyEntry(BaseModel):
    location: Location
    depth: int


class Breadcrumb(BaseModel):
    ids: list[int]
    names: list[str]
    path: str


class LocationCreate(BaseModel):
    """
    Validated command for creating a location.
    """
    name: str
    description: str | None = None
    parent_id: int | None = _parent_id_field()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_location_name(v)


class LocationUpdate(BaseModel):
    """
    Validated command for updating a location. Only fields present in the
    payload are applied, so an explicit `parentId: null` (move to the top
    level) is different from leaving `parentId` out.
    """
    name: str | None = None
    description: str | None = None
    parent_id: int | None = _parent_id_field()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_location_name(v)

    @property
    def parent_id_provided(self) -> bool:
        return "parent_id" in self.model_fields_set

    def provided_fields(self) -> dict:
        return self.model_dump(include=set(self.model_fields_set))


class LocationDeleted(BaseModel):
    message: str

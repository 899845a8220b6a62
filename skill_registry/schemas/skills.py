from pydantic import BaseModel, Field, model_validator

FROZEN = {"frozen": True}


class ParameterSpec(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(default="string", description="Free-form type tag, e.g. string or integer")
    description: str = ""
    required: bool = False

    model_config = FROZEN


class SkillRegistration(BaseModel):
    category: str | None = Field(default=None, min_length=1, description="Category name, created on demand")
    category_id: int | None = Field(default=None, description="Id of an existing category")
    name: str = Field(min_length=1)
    description: str = ""
    parameters: tuple[ParameterSpec, ...] = ()

    model_config = FROZEN

    @model_validator(mode="after")
    def _check_category_reference(self) -> "SkillRegistration":
        if (self.category is None) == (self.category_id is None):
            raise ValueError("Exactly one of category or category_id must be provided")
        return self


class ParameterOut(BaseModel):
    id: int
    name: str
    type: str
    description: str
    required: bool

    model_config = FROZEN


class SkillSummary(BaseModel):
    id: int
    category: str
    name: str
    description: str

    model_config = FROZEN


class SkillDetail(BaseModel):
    id: int
    category_id: int
    category: str
    name: str
    description: str
    parameters: tuple[ParameterOut, ...] = ()

    model_config = FROZEN


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str
    skill_count: int = 0

    model_config = FROZEN


class CatalogParameter(BaseModel):
    n: str = Field(description="name")
    t: str = Field(description="type")
    d: str = Field(default="", description="description")
    r: bool = Field(default=False, description="required")

    model_config = FROZEN


class CatalogEntry(BaseModel):
    category: str
    name: str
    description: str
    parameters: tuple[CatalogParameter, ...] = ()

    model_config = FROZEN


class SkillIndexResponse(BaseModel):
    index: str


class SchemaDescriptionResponse(BaseModel):
    dialect: str
    ddl: str

from pydantic import BaseModel, Field, field_validator


class StudentRef(BaseModel):
    cod_etu: str = Field(min_length=1, max_length=50)
    nom: str = ""
    prenom: str = ""

    model_config = {"from_attributes": True, "frozen": True}


class RosterSelector(BaseModel):
    module_code: str = Field(min_length=1, max_length=50)
    group_name: str | None = None

    @field_validator("module_code")
    @classmethod
    def normalize_module_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("module_code must not be blank")
        return code

    @field_validator("group_name")
    @classmethod
    def normalize_group_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class CohortRequest(BaseModel):
    selection: list[RosterSelector] = Field(min_length=1, max_length=50)


class CohortOut(BaseModel):
    size: int
    students: list[StudentRef]


class GroupingRuleCreate(BaseModel):
    module_pattern: str = Field(min_length=1, max_length=50)
    group_name: str = Field(min_length=1, max_length=50)
    range_start: str = Field(min_length=1, max_length=10)
    range_end: str = Field(min_length=1, max_length=10)

    @field_validator("module_pattern", "range_start", "range_end")
    @classmethod
    def uppercase(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if not cleaned:
            raise ValueError("Value must not be blank")
        return cleaned

    @field_validator("group_name")
    @classmethod
    def strip_group_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("group_name must not be blank")
        return cleaned


class GroupingRuleOut(BaseModel):
    id: str
    module_pattern: str
    group_name: str
    range_start: str
    range_end: str
    student_count: int | None = None

    model_config = {"from_attributes": True}

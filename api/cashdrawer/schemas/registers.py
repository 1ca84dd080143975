from pydantic import BaseModel, ConfigDict, Field, constr


class RegisterCreate(BaseModel):
    name: constr(min_length=1, max_length=200)
    branch_id: int = Field(ge=1)


class RegisterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    branch_id: int
    is_active: bool

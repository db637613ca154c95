from pydantic import BaseModel, ConfigDict, Field as PydanticField


class CategoryBase(BaseModel):
    name: str = PydanticField(..., min_length=1, max_length=120)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    pass


class CategoryResponse(CategoryBase):
    id: int

    model_config = ConfigDict(from_attributes=True)

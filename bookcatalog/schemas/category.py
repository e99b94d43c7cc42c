"""
Category API schemas
"""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from bookcatalog.utils.normalization import blank_to_none, camelize_keys

CategoryPath = List[str]


class CategoryBase(BaseModel):
    """Base category schema"""

    id: str
    parent_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("parentId", "parent_id"),
        serialization_alias="parentId",
    )
    title: str = Field(default="", validation_alias=AliasChoices("title", "name"))

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_pascal_case(cls, data: Any) -> Any:
        return camelize_keys(data)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value).strip()

    @field_validator("parent_id", mode="before")
    @classmethod
    def _parent_as_string(cls, value: Any) -> Any:
        value = blank_to_none(value)
        return None if value is None else str(value).strip()

    @field_validator("title", mode="before")
    @classmethod
    def _title_not_null(cls, value: Any) -> Any:
        return "" if value is None else value


class CategoryRecord(CategoryBase):
    """Flat category row from the admin category list"""


class CategoryNode(CategoryBase):
    """A category and the subtree it owns"""

    children: List["CategoryNode"] = Field(
        default_factory=list,
        validation_alias=AliasChoices("children", "subCategories"),
    )

    @field_validator("children", mode="before")
    @classmethod
    def _children_not_null(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_payload(self) -> dict:
        """Wire shape used by the catalog service"""
        return {
            "id": self.id,
            "parentId": self.parent_id,
            "title": self.title,
            "children": [child.to_payload() for child in self.children],
        }


class FlatCategory(BaseModel):
    """A category row with its nesting depth, for indented display"""

    id: str
    parent_id: Optional[str] = None
    title: str
    depth: int
    label: str


class CategoryTreeRequest(BaseModel):
    """A category forest sent by the caller"""

    categories: List[CategoryNode]


class CategoryPathRequest(CategoryTreeRequest):
    category_id: str = Field(validation_alias=AliasChoices("categoryId", "category_id"))


class CategoryPathResponse(BaseModel):
    category_id: str
    path: CategoryPath


class LegalParentsRequest(CategoryTreeRequest):
    excluded_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("excludedId", "excluded_id"))


class ReparentRequest(CategoryTreeRequest):
    node_id: str = Field(validation_alias=AliasChoices("nodeId", "node_id"))
    new_parent_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("newParentId", "new_parent_id")
    )


class ReparentResponse(BaseModel):
    node_id: str
    parent_id: Optional[str]
    path: CategoryPath
    categories: List[dict]


class CategoryParentUpdate(BaseModel):
    """New parent for a stored category; None moves it to the top level"""

    parent_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("parentId", "parent_id"))


class CategoryMoveResponse(BaseModel):
    node_id: str
    parent_id: Optional[str]


CategoryNode.model_rebuild()

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Locator(BaseModel):
    """
    Declarative description of how to find an element.
    Criteria are combined: every criterion that is set must match.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    css: Optional[str] = Field(None, description="Tag name or CSS selector, e.g. 'button', \"input[id=Name]\"")
    testid: Optional[str] = Field(None, description="Value of the data-testid attribute")
    text: Optional[str] = Field(None, description="Text content (substring unless exact=True)")
    role: Optional[str] = Field(None, description="ARIA role, e.g. 'button', 'combobox'")
    name: Optional[str] = Field(None, description="Accessible name, used together with role")
    attribute: Optional[str] = Field(None, description="Attribute name, e.g. 'data-cy' or 'aria-label'")
    attribute_value: Optional[str] = None
    label: Optional[str] = None
    placeholder: Optional[str] = None
    within: Optional["Locator"] = Field(None, description="Parent element the search is scoped to")
    index: int = Field(0, ge=0, description="Which match to use when several elements match")
    exact: bool = False
    visible: bool = True
    enabled: bool = False

    @model_validator(mode="after")
    def _check_criteria(self):
        if not any([self.css, self.testid, self.text, self.role, self.attribute, self.label, self.placeholder]):
            raise ValueError("Locator needs at least one of css, testid, text, role, attribute, label, placeholder")
        if self.attribute_value is not None and not self.attribute:
            raise ValueError("attribute_value requires attribute")
        if self.name is not None and not self.role:
            raise ValueError("name requires role")
        return self

    @classmethod
    def by_testid(cls, testid: str, **kwargs) -> "Locator":
        return cls(testid=testid, **kwargs)

    @classmethod
    def by_text(cls, text: str, css: Optional[str] = None, **kwargs) -> "Locator":
        return cls(text=text, css=css, **kwargs)

    @classmethod
    def by_role(cls, role: str, name: Optional[str] = None, **kwargs) -> "Locator":
        return cls(role=role, name=name, **kwargs)

    @classmethod
    def by_css(cls, css: str, **kwargs) -> "Locator":
        return cls(css=css, **kwargs)

    @classmethod
    def by_attribute(cls, attribute: str, value: Optional[str] = None, **kwargs) -> "Locator":
        return cls(attribute=attribute, attribute_value=value, **kwargs)

    def nth(self, index: int) -> "Locator":
        return self.model_copy(update={"index": index})

    def inside(self, parent: "Locator") -> "Locator":
        return self.model_copy(update={"within": parent})

    @property
    def attribute_selector(self) -> Optional[str]:
        if not self.attribute:
            return None
        if self.attribute_value is None:
            return f"[{self.attribute}]"
        escaped = self.attribute_value.replace('"', '\\"')
        return f'[{self.attribute}="{escaped}"]'

    def describe(self) -> str:
        parts = []
        if self.css:
            parts.append(f"css={self.css}")
        if self.testid:
            parts.append(f"testid={self.testid}")
        if self.role:
            parts.append(f"role={self.role}" + (f"[name={self.name!r}]" if self.name else ""))
        if self.attribute:
            parts.append(f"attr={self.attribute_selector}")
        if self.label:
            parts.append(f"label={self.label!r}")
        if self.placeholder:
            parts.append(f"placeholder={self.placeholder!r}")
        if self.text:
            parts.append(f"text={self.text!r}" + (" (exact)" if self.exact else ""))
        if self.index:
            parts.append(f"nth={self.index}")
        desc = " ".join(parts)
        if self.within is not None:
            desc = f"{self.within.describe()} >> {desc}"
        return desc

    def __str__(self) -> str:
        return self.describe()


Locator.model_rebuild()

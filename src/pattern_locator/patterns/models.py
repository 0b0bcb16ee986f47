"""
Pattern set models.

A pattern set is a named bundle of selector templates for one logical page
or component. Template values are semicolon-separated candidate lists,
ordered from most to least specific.

Example (YAML):
    loginPage:
      fields:
        button: "//button[text()='#{fieldName}'];button:has-text('#{fieldName}')"
        input: "//input[@id='#{forId}'];//input[@name='#{fieldName.lowercase}']"
        label: "//label[text()='#{fieldName}']"
      sections:
        Login Form: "form#login;form.login-form"
      locations:
        Header: "header;div.header"
      scroll: "div.scrollable"
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatternSet(BaseModel):
    """
    Selector templates for one page or component.

    Attributes:
        id: Pattern set id (page name)
        fields: Element type -> templates; keys may carry a dot sub-type
        sections: Section name -> container templates
        locations: Location name -> container templates
        scroll: Optional scrollable-container templates
        label_eligible: Extra element types resolved through label indirection
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    fields: Dict[str, str] = Field(default_factory=dict)
    sections: Dict[str, str] = Field(default_factory=dict)
    locations: Dict[str, str] = Field(default_factory=dict)
    scroll: Optional[str] = None
    label_eligible: List[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("pattern set id must not be empty")
        return value

    @field_validator("fields", "sections", "locations")
    @classmethod
    def strip_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        stripped = {key.strip(): template for key, template in value.items()}
        if len(stripped) != len(value):
            raise ValueError("keys must be unique after trimming whitespace")
        return stripped

    @field_validator("scroll")
    @classmethod
    def blank_scroll_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def field_template(self, element_type: str) -> Optional[str]:
        """
        Get the template for an element type, falling back from sub-type.

        ``"checkbox.fieldSet"`` is tried as-is first, then ``"checkbox"``.
        """
        if element_type in self.fields:
            return self.fields[element_type]
        base_type, _, sub_type = element_type.partition(".")
        if sub_type and base_type in self.fields:
            return self.fields[base_type]
        return None


@dataclass(frozen=True)
class ElementTypeSpec:
    """
    Registry entry describing how an element type is resolved.

    Attributes:
        name: Base element type (e.g. 'input', 'button')
        label_eligible: Resolve through the label's ``for`` reference first
    """
    name: str
    label_eligible: bool = False

"""Desired and observed shapes of the remote assistant."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

ASSISTANT_NAME = "EmpleaBot"

ASSISTANT_INSTRUCTIONS = """You are EmpleaBot, an AI assistant specialized in helping users with their job search and career development needs. You can:
  1. Review and analyze resumes/CVs
  2. Provide job search strategies
  3. Help with interview preparation
  4. Offer career advice and guidance
  5. Assist with professional development planning

  Additional Instructions:
  - Always communicate in the same language the user is using
  - Be professional but friendly
  - Provide specific, actionable advice
  - When reviewing resumes, be thorough and constructive
  - For job search strategies, consider the user's location and industry
  - For interview preparation, include common questions and best practices
  - Always maintain confidentiality of user information"""


class ToolKind(str, Enum):
    """Built-in assistant tools that can be declared locally."""

    CODE_INTERPRETER = "code_interpreter"
    FILE_SEARCH = "file_search"


class AssistantDescriptor(BaseModel):
    """Locally declared configuration of the assistant.

    Attributes:
        name: Display name of the assistant.
        instructions: System instructions.
        model: Model (or Azure deployment) identifier.
        tools: Declared tools, without duplicates.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    instructions: str
    model: str = Field(..., min_length=1)
    tools: tuple[ToolKind, ...] = ()

    @field_validator("tools")
    @classmethod
    def reject_duplicate_tools(cls, v: tuple[ToolKind, ...]) -> tuple[ToolKind, ...]:
        """Each tool kind may be declared once."""
        if len(set(v)) != len(v):
            raise ValueError("Duplicate tool kinds in assistant descriptor")
        return v

    @property
    def tool_types(self) -> frozenset[str]:
        return frozenset(tool.value for tool in self.tools)

    def to_api_params(self) -> dict:
        """Build the keyword arguments for an assistants create/update call."""
        return {
            "name": self.name,
            "instructions": self.instructions,
            "model": self.model,
            "tools": [{"type": tool.value} for tool in self.tools],
        }

    def differences(self, observed: "RemoteAssistant") -> list[str]:
        """Return the names of the fields where ``observed`` diverges.

        Tools are compared as sets of type names, so declaration order does
        not matter.
        """
        changed = [
            field
            for field in ("name", "instructions", "model")
            if getattr(self, field) != getattr(observed, field)
        ]
        if self.tool_types != frozenset(observed.tool_types):
            changed.append("tools")
        return changed

    def matches(self, observed: "RemoteAssistant") -> bool:
        return not self.differences(observed)


class RemoteAssistant(BaseModel):
    """Assistant as last observed on the server."""

    id: str
    name: str | None = None
    instructions: str | None = None
    model: str
    tool_types: tuple[str, ...] = ()


def default_descriptor(model: str) -> AssistantDescriptor:
    """The EmpleaBot assistant declaration for the given model."""
    return AssistantDescriptor(
        name=ASSISTANT_NAME,
        instructions=ASSISTANT_INSTRUCTIONS,
        model=model,
        tools=(ToolKind.CODE_INTERPRETER, ToolKind.FILE_SEARCH),
    )

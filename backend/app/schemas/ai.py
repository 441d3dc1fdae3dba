"""
AI Response Envelope

Tagged union describing what the generative backends must answer with.
The ``type`` field discriminates the variant; anything that fails to
validate is degraded to a plain chat envelope by the orchestrator.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from app.core.constants import AI_SENDER


class FileContents(BaseModel):
    contents: str


class FileNode(BaseModel):
    file: FileContents


class CommandSpec(BaseModel):
    main_item: str = Field(alias="mainItem")
    commands: List[str] = []

    model_config = ConfigDict(populate_by_name=True)


class _EnvelopeBase(BaseModel):
    text: str = ""
    error: bool = False
    error_type: Optional[str] = Field(None, alias="errorType")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    note: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_message_payload(self) -> Dict[str, Any]:
        """Outbound ``project-message`` payload from the synthetic AI sender."""
        payload: Dict[str, Any] = {"message": self.text, "sender": dict(AI_SENDER)}
        if self.error:
            payload["error"] = True
            if self.error_type:
                payload["errorType"] = self.error_type
        if self.note:
            payload["note"] = self.note
        return payload


class ChatEnvelope(_EnvelopeBase):
    type: Literal["chat"] = "chat"


class ExplanationEnvelope(_EnvelopeBase):
    type: Literal["explanation"] = "explanation"


class CodeEnvelope(_EnvelopeBase):
    type: Literal["code"] = "code"
    file_tree: Dict[str, FileNode] = Field(alias="fileTree")
    build_command: Optional[CommandSpec] = Field(None, alias="buildCommand")
    start_command: Optional[CommandSpec] = Field(None, alias="startCommand")

    @field_validator("file_tree")
    @classmethod
    def drop_empty_files(cls, v: Dict[str, FileNode]) -> Dict[str, FileNode]:
        """A code envelope must carry at least one file with real contents."""
        kept = {name: node for name, node in v.items() if node.file.contents.strip()}
        if not kept:
            raise ValueError("fileTree has no file with contents")
        return kept

    def to_message_payload(self) -> Dict[str, Any]:
        payload = super().to_message_payload()
        payload["fileTree"] = {
            name: node.model_dump() for name, node in self.file_tree.items()
        }
        if self.build_command:
            payload["buildCommand"] = self.build_command.model_dump(by_alias=True)
        if self.start_command:
            payload["startCommand"] = self.start_command.model_dump(by_alias=True)
        return payload


AIEnvelope = Annotated[
    Union[ChatEnvelope, ExplanationEnvelope, CodeEnvelope],
    Field(discriminator="type"),
]

envelope_adapter: TypeAdapter = TypeAdapter(AIEnvelope)


class AIResultResponse(BaseModel):
    """HTTP response for one-shot generation."""

    type: str
    text: str
    file_tree: Optional[Dict[str, Any]] = Field(None, alias="fileTree")
    build_command: Optional[Dict[str, Any]] = Field(None, alias="buildCommand")
    start_command: Optional[Dict[str, Any]] = Field(None, alias="startCommand")
    error: bool = False
    error_type: Optional[str] = Field(None, alias="errorType")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    note: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

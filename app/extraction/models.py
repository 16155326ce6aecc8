from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ExtractionFailureReason = Literal[
    "unsupported_type",
    "binary_or_scanned",
    "empty_content",
    "parse_error",
]


class UploadedDocument(BaseModel):
    content: bytes
    media_type: str = ""
    filename: str = ""

    @field_validator("media_type")
    @classmethod
    def _normalize_media_type(cls, value: str) -> str:
        return (value or "").split(";", 1)[0].strip().lower()

    @property
    def extension(self) -> str:
        name = (self.filename or "").strip().lower()
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1]


class ExtractionSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    text: str


class ExtractionFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    reason: ExtractionFailureReason
    detail: str


ExtractionResult = Annotated[
    Union[ExtractionSuccess, ExtractionFailure],
    Field(discriminator="status"),
]

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_name: str | None = Field(default=None, alias="imageName", examples=["photo.jpg"])
    image_data: str | None = Field(
        default=None,
        alias="imageData",
        description="Data URI (`data:<media-type>;base64,<body>`) or bare base64.",
    )


class SignResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: Literal[True] = True
    file_name: str = Field(alias="fileName")
    data_url: str = Field(alias="dataUrl")


class VerifyResponse(BaseModel):
    ok: bool
    output: str
    error: str


class HealthResponse(BaseModel):
    ok: bool
    message: str


class ErrorResponse(BaseModel):
    ok: Literal[False] = False
    error: str

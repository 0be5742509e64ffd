from typing import Literal, TypedDict


class ImageRequestBody(TypedDict):
    imageName: str
    imageData: str


class HealthResponse(TypedDict):
    ok: bool
    message: str


class SignSuccess(TypedDict):
    ok: Literal[True]
    fileName: str
    dataUrl: str


class SignFailure(TypedDict):
    ok: Literal[False]
    error: str


SignResponse = SignSuccess | SignFailure


class VerifyResponse(TypedDict):
    ok: bool
    output: str
    error: str

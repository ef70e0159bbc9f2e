"""Pydantic request/response schemas for the Clarifai predict endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ImageRef(BaseModel):
    url: str


class InputData(BaseModel):
    image: ImageRef


class PredictInput(BaseModel):
    data: InputData


class PredictRequest(BaseModel):
    """Outbound body: ``{"inputs": [{"data": {"image": {"url": ...}}}]}``."""

    inputs: list[PredictInput]

    @classmethod
    def for_image(cls, url: str) -> PredictRequest:
        return cls(inputs=[PredictInput(data=InputData(image=ImageRef(url=url)))])


class Concept(BaseModel):
    """A single predicted label with its confidence."""

    model_config = ConfigDict(strict=True)

    name: str
    value: float


class OutputData(BaseModel):
    # Absent when the model found nothing for the image.
    concepts: list[Concept] | None = None


class Output(BaseModel):
    data: OutputData


class PredictResponse(BaseModel):
    """Subset of the predict response consumed by the indexer: ``outputs[0].data.concepts``."""

    outputs: list[Output] = Field(min_length=1)

    @property
    def concepts(self) -> list[Concept] | None:
        return self.outputs[0].data.concepts

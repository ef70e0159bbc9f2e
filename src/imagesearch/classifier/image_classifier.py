"""Image classification through the Clarifai predict API.

The indexer only depends on the ``ImageClassifier`` protocol; ``ClarifaiClassifier`` is
the production implementation and tests substitute their own stubs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import ValidationError

from imagesearch.classifier.schemas import PredictRequest, PredictResponse
from imagesearch.errors import RequestConstructionError, ResponseShapeError, TransportError

if TYPE_CHECKING:
    from types import TracebackType

    from imagesearch.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """A single classification prediction."""

    label: str
    confidence: float


class ImageClassifier(Protocol):
    """Protocol for image classifiers."""

    def classify(self, image: str) -> list[ClassificationResult]:
        """Classify an image and return its labels.

        Args:
            image: URL of the image to classify.

        Returns:
            Zero or more labels with confidences, in the order the classifier produced them.

        Raises:
            ClassifierError: If the call fails or the response cannot be interpreted.
        """
        ...


class ClarifaiClassifier:
    """Submits image URLs to a Clarifai model and decodes the predicted concepts."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        if not settings.api_key:
            raise RequestConstructionError("A Clarifai API key is required to classify images")

        self._url = settings.classifier_url
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Key {settings.api_key}",
        }
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=settings.request_timeout)
        self._timeout = settings.request_timeout

    def classify(self, image: str) -> list[ClassificationResult]:
        """Classify one image URL.

        Raises:
            RequestConstructionError: If the request cannot be built.
            TransportError: On network failure, timeout, or an HTTP error status.
            ResponseShapeError: If the body is not JSON or lacks ``outputs[0].data``.
        """
        try:
            body = PredictRequest.for_image(image).model_dump_json()
            request = self._client.build_request(
                "POST",
                self._url,
                content=body,
                headers=self._headers,
                timeout=self._timeout,
            )
        except (ValidationError, httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestConstructionError(f"Could not build request for {image}: {exc}", image) from exc

        try:
            response = self._client.send(request)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Classifier returned HTTP {exc.response.status_code} for {image}", image
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Classifier request failed for {image}: {exc}", image) from exc

        try:
            decoded = PredictResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise ResponseShapeError(f"Unexpected classifier response for {image}: {exc}", image) from exc

        concepts = decoded.concepts
        if concepts is None:
            logger.info("Found no concepts for %s", image)
            return []

        return [ClassificationResult(label=concept.name, confidence=concept.value) for concept in concepts]

    def close(self) -> None:
        """Close the underlying HTTP client if this classifier created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ClarifaiClassifier:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

"""Index build pass: classify every candidate image and fold the labels into an index.

Architecture:
    candidate list -> ThreadPoolExecutor(N) -> classifier -> single writer -> Index

With ``max_workers == 1`` no pool is created and images are classified one at a time.
Results are always folded in candidate-list order by the calling thread, so both paths
produce the same index.
"""

from __future__ import annotations

import contextlib
import functools
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from imagesearch.classifier.image_classifier import ClarifaiClassifier
from imagesearch.errors import BuildCancelledError, ClassifierError
from imagesearch.fetcher import fetch_image_list
from imagesearch.index.models import Index
from imagesearch.index.store import IndexStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    import httpx

    from imagesearch.classifier.image_classifier import ClassificationResult, ImageClassifier
    from imagesearch.config import Settings

    _Outcome = tuple[str, Callable[[], list[ClassificationResult]]]

logger = logging.getLogger(__name__)


class IndexBuilder:
    """Drives a classifier over candidate images and accumulates an ``Index``."""

    def __init__(self, classifier: ImageClassifier, settings: Settings) -> None:
        self._classifier = classifier
        self._settings = settings
        self.skipped: list[str] = []

    def build(self, images: Sequence[str], cancel: threading.Event | None = None) -> Index:
        """Classify ``images`` and return the finalized index.

        Raises:
            ClassifierError: If a classifier call fails and ``on_error`` is ``"abort"``.
            BuildCancelledError: If ``cancel`` is set or ``build_deadline`` passes.
        """
        self.skipped = []
        index = Index()
        deadline = None
        if self._settings.build_deadline is not None:
            deadline = time.monotonic() + self._settings.build_deadline

        if self._settings.max_workers > 1 and len(images) > 1:
            outcomes = self._classify_pooled(images, cancel, deadline)
        else:
            outcomes = self._classify_sequential(images, cancel, deadline)

        processed = 0
        with contextlib.closing(outcomes):
            for image, result in outcomes:
                try:
                    matches = result()
                except ClassifierError as exc:
                    if self._settings.on_error == "abort":
                        raise
                    logger.warning("Skipping %s: %s", image, exc)
                    self.skipped.append(image)
                else:
                    for match in matches:
                        index.add(match.label, image, match.confidence)

                processed += 1
                if processed % self._settings.progress_every == 0:
                    logger.info("%d images indexed.", processed)

        logger.info("Indexed %d images into %d terms (%d skipped)", processed, len(index), len(self.skipped))
        return index.finalize()

    def _classify(
        self,
        image: str,
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> list[ClassificationResult]:
        if cancel is not None and cancel.is_set():
            raise BuildCancelledError("Index build was cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            raise BuildCancelledError(f"Index build exceeded its {self._settings.build_deadline}s deadline")
        return self._classifier.classify(image)

    def _classify_sequential(
        self,
        images: Sequence[str],
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> Iterator[_Outcome]:
        for image in images:
            yield image, functools.partial(self._classify, image, cancel, deadline)

    def _classify_pooled(
        self,
        images: Sequence[str],
        cancel: threading.Event | None,
        deadline: float | None,
    ) -> Iterator[_Outcome]:
        executor = ThreadPoolExecutor(
            max_workers=self._settings.max_workers,
            thread_name_prefix="classifier",
        )
        try:
            futures = [executor.submit(self._classify, image, cancel, deadline) for image in images]
            for image, future in zip(images, futures):
                yield image, future.result
        finally:
            executor.shutdown(wait=True, cancel_futures=True)


def rebuild_index(
    settings: Settings,
    url: str | None = None,
    classifier: ImageClassifier | None = None,
    list_client: httpx.Client | None = None,
    cancel: threading.Event | None = None,
) -> Index:
    """Fetch the candidate list, build a fresh index and persist it to ``settings.index_path``."""
    images = fetch_image_list(url, settings, client=list_client)

    if classifier is None:
        with ClarifaiClassifier(settings) as owned:
            index = IndexBuilder(owned, settings).build(images, cancel)
    else:
        index = IndexBuilder(classifier, settings).build(images, cancel)

    IndexStore(settings.index_path).save(index)
    return index

"""Inverted index mapping classifier labels to ranked images."""

from __future__ import annotations

from pydantic import BaseModel, Field


class IndexItem(BaseModel):
    """A single image scored against one label."""

    image: str
    score: float


class Index(BaseModel):
    """Label -> images ranked by score.

    Labels are stored exactly as the classifier returned them. ``lookup`` does not
    normalize case, so a query lowercased by the caller only hits lowercase labels.
    """

    terms: dict[str, list[IndexItem]] = Field(default_factory=dict)

    def add(self, label: str, image: str, score: float) -> None:
        """Append an image to a label's list, creating the list on first use."""
        self.terms.setdefault(label, []).append(IndexItem(image=image, score=score))

    def finalize(self) -> Index:
        """Sort every label's list by score, highest first.

        The sort is stable, so equal scores keep insertion order and repeated calls
        leave the order unchanged.
        """
        for items in self.terms.values():
            items.sort(key=lambda item: item.score, reverse=True)
        return self

    def lookup(self, term: str) -> list[IndexItem] | None:
        """Return the ranked images for an exact label, or None if the label is absent."""
        return self.terms.get(term)

    @property
    def labels(self) -> list[str]:
        return list(self.terms)

    def __contains__(self, term: object) -> bool:
        return term in self.terms

    def __len__(self) -> int:
        return len(self.terms)

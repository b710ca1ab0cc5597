"""Plain data records exchanged with the host application.

The host owns the authoritative lists of highlights and signatures; these
records are what it receives through the sync callbacks. Geometry is in
container-relative pixels.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


def new_id() -> str:
    """Generate a unique record identifier."""
    return str(uuid4())


class HighlightData(BaseModel):
    """A comment attached to a span of the plain-text projection.

    ``start``/``end`` are a snapshot taken at creation time. They are not
    updated when the document is edited afterwards.
    """

    id: str = Field(default_factory=new_id)
    start: int = Field(ge=0)
    end: int
    text: str = Field(min_length=1)
    comment: str = Field(min_length=1)

    @model_validator(mode="after")
    def span_matches_text(self) -> HighlightData:
        if self.end <= self.start:
            msg = f"end ({self.end}) must be greater than start ({self.start})"
            raise ValueError(msg)
        if self.end - self.start != len(self.text):
            msg = "end - start must equal the length of text"
            raise ValueError(msg)
        return self


class Point(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    width: float
    height: float


class Rect(BaseModel):
    """A bounding box, as reported by the browser for a rendered element."""

    left: float
    top: float
    width: float = 0.0
    height: float = 0.0

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2


class SignerInfo(BaseModel):
    """Identity printed under a signature. Only ``name`` is required."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    title: str = ""
    tc_no: str = Field(default="", alias="tcNo")
    company: str = ""


class SignatureOverlay(BaseModel):
    """A signature block floating above the document.

    Created pending (``image == ""``) and committed once the capture surface
    returns image data. Drag and resize gestures mutate ``position`` and
    ``size`` in place.
    """

    id: str = Field(default_factory=new_id)
    image: str = ""
    position: Point = Field(default_factory=Point)
    size: Size
    date: str = ""
    signer: SignerInfo = Field(default_factory=SignerInfo)

    @property
    def is_pending(self) -> bool:
        return self.image == ""

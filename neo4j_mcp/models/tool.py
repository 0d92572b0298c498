"""
Transport-agnostic tool reply envelope.

Tool handlers answer with a list of content items; each transport renders
them in its own framing (MCP content blocks, JSON over HTTP).
"""

import base64
import json
from typing import Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TextItem(BaseModel):
    """Plain text content."""
    type: Literal["text"] = "text"
    text: str


class ResourceItem(BaseModel):
    """Embedded resource content (e.g. a JSON payload)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["resource"] = "resource"
    uri: str
    mime_type: str = "application/json"
    text: str

    @classmethod
    def from_json(cls, payload: Any) -> "ResourceItem":
        """
        Wrap a JSON-serializable payload as a data URI resource.

        Values JSON cannot represent natively (e.g. bytes) are stringified.

        Raises:
            ValueError: If the payload holds NaN or Infinity; normalized
                records carry those as None
        """
        text = json.dumps(payload, indent=2, default=str, allow_nan=False)
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        return cls(uri=f"data:application/json;base64,{encoded}", text=text)


ContentItem = Union[TextItem, ResourceItem]


class ToolResponse(BaseModel):
    """Reply of a tool invocation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: List[ContentItem] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, *lines: str, is_error: bool = False) -> "ToolResponse":
        """Build a response made of text lines only."""
        return cls(content=[TextItem(text=line) for line in lines], is_error=is_error)

    @property
    def texts(self) -> List[str]:
        """Text of every text item, in order."""
        return [item.text for item in self.content if isinstance(item, TextItem)]

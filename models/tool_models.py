from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.chat_models import ChatUsage
from models.image_models import PersistedImage


@dataclass
class ToolResult:
    """Successful tool invocation: summary text plus per-image outcomes."""

    text: str
    model: str
    images: List[PersistedImage] = field(default_factory=list)
    usage: Optional[ChatUsage] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "images": [
                {
                    "reference": image.display_reference,
                    "saved": image.saved,
                    "saved_path": image.saved_path,
                }
                for image in self.images
            ],
            "usage": self.usage.model_dump() if self.usage else None,
        }

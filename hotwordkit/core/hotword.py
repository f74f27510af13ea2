"""
Hotword records and the ordered hotword registry.

A hotword pairs a recognition model file with a detection sensitivity and a
display name. The registry keeps hotwords in registration order: the Nth
registered hotword (1-indexed) is reported by the engine as result code N.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Universal (.umdl) and personal (.pmdl) model files
MODEL_EXTENSIONS = ('.umdl', '.pmdl')

DEFAULT_SENSITIVITY = 0.5


def derive_name(model: str) -> str:
    """
    Derive a hotword name from a model path.

    Strips a known model extension and returns the final path segment,
    e.g. ``"resources/models/snowboy.umdl"`` -> ``"snowboy"``.

    Args:
        model: Model file path or identifier

    Returns:
        Derived hotword name

    Raises:
        ValueError: If the path yields an empty name
    """
    name = model
    for ext in MODEL_EXTENSIONS:
        if name.endswith(ext):
            name = name[:-len(ext)]
            break

    name = name.replace('\\', '/').split('/')[-1]
    if not name:
        raise ValueError(f"Cannot derive hotword name from model path: {model!r}")
    return name


@dataclass(frozen=True)
class Hotword:
    """
    A registered keyword with its model reference and sensitivity.

    Attributes:
        model: Path to the recognition model file
        sensitivity: Detection sensitivity (0.0 to 1.0)
        name: Keyword passed to handlers; derived from ``model`` when empty
    """

    model: str
    sensitivity: float = DEFAULT_SENSITIVITY
    name: str = ""

    def __post_init__(self):
        if not 0.0 <= self.sensitivity <= 1.0:
            raise ValueError(
                f"Sensitivity must be between 0.0 and 1.0, got {self.sensitivity}"
            )
        if not self.name:
            object.__setattr__(self, 'name', derive_name(self.model))

    @classmethod
    def from_model(
        cls,
        model: str,
        sensitivity: float = DEFAULT_SENSITIVITY,
        name: Optional[str] = None
    ) -> 'Hotword':
        """Create a hotword, naming it after the model file unless ``name`` is given."""
        return cls(model=model, sensitivity=sensitivity, name=name or "")

    @property
    def encoded_sensitivity(self) -> str:
        """Sensitivity in the fixed two-decimal form the engine expects."""
        return f"{self.sensitivity:.2f}"


@dataclass
class HotwordRegistry:
    """Ordered collection of hotwords and their engine encodings."""

    hotwords: List[Hotword] = field(default_factory=list)

    def register(self, hotword: Hotword) -> int:
        """
        Append a hotword.

        Returns:
            Result code the engine will report for this hotword
        """
        self.hotwords.append(hotword)
        code = len(self.hotwords)
        logger.debug(f"Registered hotword '{hotword.name}' as result code {code}")
        return code

    @property
    def models_string(self) -> str:
        return ",".join(h.model for h in self.hotwords)

    @property
    def sensitivities_string(self) -> str:
        return ",".join(h.encoded_sensitivity for h in self.hotwords)

    def encode(self) -> Tuple[str, str]:
        """Return the comma-joined model list and sensitivity list."""
        return self.models_string, self.sensitivities_string

    def __len__(self) -> int:
        return len(self.hotwords)

    def __iter__(self) -> Iterator[Hotword]:
        return iter(self.hotwords)

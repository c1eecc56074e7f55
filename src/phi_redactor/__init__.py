"""PHI Redactor: deterministic PHI redaction for clinical notes."""

from .config import RedactorConfig, load_config, load_from_json, load_from_yaml
from .errors import ConfigurationError, InputError, RedactorError, ResolutionError
from .normalizer import NormalizedText, normalize
from .redactor import Redactor, apply_spans, redact
from .resolver import resolve_spans
from .types import Category, PLACEHOLDERS, RedactionResult, Span

__all__ = [
    "Redactor", "RedactorConfig", "redact",
    "load_config", "load_from_json", "load_from_yaml",
    "normalize", "NormalizedText", "resolve_spans", "apply_spans",
    "Category", "PLACEHOLDERS", "Span", "RedactionResult",
    "RedactorError", "ConfigurationError", "InputError", "ResolutionError",
]
__version__ = "0.1.0"

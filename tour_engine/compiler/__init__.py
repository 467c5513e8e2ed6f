from tour_engine.compiler.parser import parse_registry_yaml
from tour_engine.compiler.validator import format_errors, validate_registry

__all__ = ["format_errors", "parse_registry_yaml", "validate_registry"]

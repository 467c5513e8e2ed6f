"""Message catalog: resolves dotted translation keys with {{name}} interpolation."""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

TEMPLATE_RE = re.compile(r"\{\{(.+?)\}\}")


def interpolate(template: str, args: Mapping[str, Any] | None) -> str:
    if not args:
        return template

    def replacer(m: re.Match) -> str:
        val = _resolve_path(m.group(1).strip(), args)
        return m.group(0) if val is None else str(val)
    return TEMPLATE_RE.sub(replacer, template)


def _resolve_path(path: str, context: Mapping[str, Any]) -> Any:
    current: Any = context
    for part in path.split("."):
        if current is None:
            return None
        bracket = re.match(r"^(\w+)\[(\d+)\]$", part)
        if bracket:
            current = current.get(bracket.group(1)) if isinstance(current, Mapping) else None
            if isinstance(current, list) and int(bracket.group(2)) < len(current):
                current = current[int(bracket.group(2))]
            else:
                return None
        elif isinstance(current, Mapping):
            current = current.get(part)
        else:
            return None
    return current


class Catalog:
    """Callable ``(key, args) -> text``. Unknown keys resolve to the key itself."""

    def __init__(self, messages: Mapping[str, Any] | None = None):
        self.messages: dict[str, Any] = dict(messages or {})

    @classmethod
    def from_yaml(cls, content: str) -> Catalog:
        raw = yaml.safe_load(content)
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError("Invalid catalog: expected a mapping")
        return cls(raw)

    @classmethod
    def load(cls, locales_dir: str | Path, locale: str) -> Catalog:
        path = Path(locales_dir) / f"{locale}.yaml"
        if not path.exists():
            logger.debug("no catalog at %s, keys will render verbatim", path)
            return cls()
        return cls.from_yaml(path.read_text(encoding="utf-8"))

    def __call__(self, key: str, args: Mapping[str, Any] | None = None) -> str:
        message = _resolve_path(key, self.messages)
        if not isinstance(message, str):
            return key
        return interpolate(message, args)

    def __contains__(self, key: str) -> bool:
        return isinstance(_resolve_path(key, self.messages), str)

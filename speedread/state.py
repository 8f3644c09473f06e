from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path

log = logging.getLogger(__name__)


@dataclass
class DocState:
    """Reading position of one document, persisted as one JSON file per identifier."""

    identifier: str
    section_index: int = 0
    word_index: int = 0

    @staticmethod
    def path_for(state_dir, identifier: str) -> Path:
        digest = hashlib.sha1(identifier.encode("utf-8")).hexdigest()
        return Path(state_dir) / f"{digest}.json"

    @classmethod
    def load(cls, state_dir, identifier: str) -> "DocState":
        """Load the saved position, or ``(0, 0)`` if it is missing or unreadable."""
        path = cls.path_for(state_dir, identifier)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return cls(identifier)
        except (OSError, ValueError) as e:
            log.warning("ignoring unreadable state %s: %s", path, e)
            return cls(identifier)

        if not isinstance(data, dict) or data.get("identifier") != identifier:
            log.warning("ignoring state %s: identifier mismatch", path)
            return cls(identifier)

        section_index = data.get("section_index")
        word_index = data.get("word_index")
        for value in (section_index, word_index):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                log.warning("ignoring state %s: bad position %r", path, value)
                return cls(identifier)
        return cls(identifier, section_index, word_index)

    def store(self, state_dir) -> bool:
        """Write the position; returns ``False`` (and logs) if it cannot be written."""
        path = self.path_for(state_dir, self.identifier)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
            ) as tmp:
                json.dump(asdict(self), tmp, indent=2)
            os.replace(tmp.name, path)
        except OSError as e:
            log.warning("could not save reading position to %s: %s", path, e)
            return False
        log.debug("saved %s to %s", self, path)
        return True

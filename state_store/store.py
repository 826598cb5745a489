"""Key-value persistence of character documents and cached breakdowns."""

from decimal import Decimal
import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Tuple

from ledger_core.errors import NotFoundError
from ledger_core.models import Character
from sim_engine.networth import NetWorthBreakdown

from .codec import character_from_dict, character_to_dict

logger = logging.getLogger(__name__)

BREAKDOWN_SUFFIX = ".breakdown.json"


class StateStore(Protocol):
    def save_character(self, character: Character) -> None:
        ...

    def load_character(self, character_id: str) -> Character:
        ...

    def list_characters(self) -> Tuple[str, ...]:
        ...

    def save_breakdown(self, character: Character, breakdown: NetWorthBreakdown) -> None:
        ...

    def load_breakdown(self, character: Character) -> Optional[NetWorthBreakdown]:
        ...


class FileStateStore:
    """One JSON document per character plus a separately keyed breakdown cache."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save_character(self, character: Character) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        payload = character_to_dict(character)
        self._character_path(character.character_id).write_text(json.dumps(payload, indent=2))

    def load_character(self, character_id: str) -> Character:
        path = self._character_path(character_id)
        if not path.exists():
            raise NotFoundError(f"Unknown character_id: {character_id}")
        return character_from_dict(json.loads(path.read_text()))

    def exists(self, character_id: str) -> bool:
        return self._character_path(character_id).exists()

    def list_characters(self) -> Tuple[str, ...]:
        if not self._directory.exists():
            return ()
        return tuple(
            sorted(
                path.name[: -len(".json")]
                for path in self._directory.glob("*.json")
                if not path.name.endswith(BREAKDOWN_SUFFIX)
            )
        )

    def save_breakdown(self, character: Character, breakdown: NetWorthBreakdown) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        payload = {
            "character_id": character.character_id,
            "revision": character.revision,
            "cash": str(character.cash),
            "breakdown": breakdown.to_dict(),
        }
        self._breakdown_path(character.character_id).write_text(json.dumps(payload, indent=2))

    def load_breakdown(self, character: Character) -> Optional[NetWorthBreakdown]:
        """Return the cached breakdown unless the character's cash has drifted."""

        path = self._breakdown_path(character.character_id)
        if not path.exists():
            return None
        payload = json.loads(path.read_text())
        if Decimal(payload["cash"]) != character.cash:
            logger.debug("Breakdown cache for %s is stale", character.character_id)
            path.unlink()
            return None
        return NetWorthBreakdown.from_dict(payload["breakdown"])

    def delete(self, character_id: str) -> None:
        for path in (self._character_path(character_id), self._breakdown_path(character_id)):
            if path.exists():
                path.unlink()

    def _character_path(self, character_id: str) -> Path:
        _check_identifier(character_id)
        return self._directory / f"{character_id}.json"

    def _breakdown_path(self, character_id: str) -> Path:
        _check_identifier(character_id)
        return self._directory / f"{character_id}{BREAKDOWN_SUFFIX}"


def _check_identifier(character_id: str) -> None:
    if not character_id or "/" in character_id or "\\" in character_id or character_id.startswith("."):
        raise ValueError(f"Invalid character_id: {character_id!r}")

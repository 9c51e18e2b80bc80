from typing import Any, Dict, List, Type, TypeVar
from pathlib import Path
import json

import anyio
import structlog
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class SnapshotStore:
    """Reads and rewrites whole JSON snapshots, one file per name"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    async def load(self, name: str) -> Dict[str, Any]:
        """Snapshot contents, or an empty dict when missing, unreadable or malformed"""

        path = anyio.Path(self.path_for(name))
        try:
            raw = await path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Snapshot not found, starting empty", snapshot=name, path=str(path))
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Snapshot unreadable, starting empty", snapshot=name, error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Snapshot is not valid JSON, starting empty", snapshot=name, error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("Snapshot has unexpected shape, starting empty", snapshot=name)
            return {}
        return data

    async def save(self, name: str, payload: Dict[str, Any]) -> bool:
        """Rewrite a snapshot; failures are logged and reported, never raised"""

        directory = anyio.Path(self.directory)
        try:
            await directory.mkdir(parents=True, exist_ok=True)
            await (directory / f"{name}.json").write_text(
                json.dumps(payload, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save snapshot", snapshot=name, error=str(e))
            return False
        return True


def validate_records(records: Any, model: Type[M], source: str = "") -> List[M]:
    """Validate a list of raw records, dropping the ones that do not parse"""

    if not isinstance(records, list):
        return []

    valid: List[M] = []
    for index, record in enumerate(records):
        try:
            valid.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "Dropping malformed record",
                source=source,
                model=model.__name__,
                index=index,
                errors=e.error_count(),
            )
    return valid

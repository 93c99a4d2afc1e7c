#!/usr/bin/env python3
"""Load note snapshots exported by the journaling app."""

import json
from pathlib import Path
from typing import Any, List, Union

from notegraph.core.logging_config import get_logger
from notegraph.core.models import Note
from notegraph.core.performance import performance_timer
from notegraph.tree.tree_exceptions import SnapshotLoadError

logger = get_logger(__name__)


def parse_notes(data: Any, source: str = "<memory>") -> List[Note]:
    """Turn a decoded JSON payload into notes.

    Accepts a bare array or an object wrapping it under ``notes``. Records
    without an id are skipped with a warning.
    """
    if isinstance(data, dict) and 'notes' in data:
        data = data['notes']

    if not isinstance(data, list):
        raise SnapshotLoadError(source, "expected a JSON array of notes")

    notes = []
    for position, record in enumerate(data):
        if not isinstance(record, dict) or not record.get('id'):
            logger.warning(f"Skipping note record #{position} in {source}: missing id")
            continue
        notes.append(Note.from_dict(record))

    return notes


@performance_timer("load_notes")
def load_notes(file_path: Union[str, Path]) -> List[Note]:
    """Read a JSON note snapshot from disk."""
    path = Path(file_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise SnapshotLoadError(str(path), "file does not exist")
    except UnicodeDecodeError as e:
        raise SnapshotLoadError(str(path), f"file is not valid UTF-8 ({e})")
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(str(path), f"invalid JSON ({e})")
    except OSError as e:
        raise SnapshotLoadError(str(path), f"cannot read file ({e.strerror or e})")

    notes = parse_notes(data, str(path))
    logger.info(f"Loaded {len(notes)} notes from {path}")
    return notes

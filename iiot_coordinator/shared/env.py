"""Environment helpers for resolving Docker-style secret files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_SECRET_SUFFIX = "_FILE"


def load_secret_file_variables() -> None:
    """
    Expose the contents of ``<KEY>_FILE`` secrets as ``<KEY>``.

    Registry tokens and broker credentials are mounted as files in the
    deployment; an explicitly set ``KEY`` always wins over its file.
    Unreadable files are logged and ignored.
    """

    for key, file_path in list(os.environ.items()):
        if not key.endswith(_SECRET_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(_SECRET_SUFFIX)]
        if os.environ.get(target_key):
            continue
        try:
            os.environ[target_key] = Path(file_path).read_text(encoding="utf-8").strip()
        except FileNotFoundError as exc:
            logger.warning(
                "env.secret_file.missing",
                extra={"key": key, "path": file_path, "error": str(exc)},
            )
        except (UnicodeDecodeError, OSError) as exc:
            logger.warning(
                "env.secret_file.load_failed",
                extra={"key": key, "path": file_path, "error": str(exc)},
            )


load_secret_file_variables()

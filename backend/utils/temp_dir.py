"""
SourceWatch Temporary Directory Helper.

Scoped temporary directories that are always cleaned up.
Requires Python 3.11+.
"""

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def temp_dir(prefix: str = "tmp-sourcewatch-") -> Iterator[Path]:
    """
    Create a temporary directory for the duration of a block.

    The directory and everything inside it is removed when the block
    exits, whether it returns normally or raises. A failed removal is
    logged rather than raised so it cannot hide the block's own error.

    Args:
        prefix: Name prefix for the created directory

    Yields:
        Absolute path of the new directory
    """
    path = Path(tempfile.mkdtemp(prefix=prefix)).resolve()
    logger.debug("temp_dir_created", path=str(path))
    try:
        yield path
    finally:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("temp_dir_cleanup_failed", path=str(path), error=str(e))
        else:
            logger.debug("temp_dir_removed", path=str(path))

import asyncio
import logging
import shutil
import uuid
from pathlib import Path

import aiofiles.os

logger = logging.getLogger(__name__)


class WorkspaceService:
    """
    Hands out unique working directory paths under a root and removes them.
    The directory itself is created by `git clone`.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def allocate(self) -> Path:
        return self.root / str(uuid.uuid4())

    async def release(self, path: Path) -> None:
        """Recursively removes a working directory if anything was created there."""
        if not await aiofiles.os.path.exists(path):
            return
        await asyncio.to_thread(shutil.rmtree, path)

"""
Capture Path - turns a finished job's output and exit status into a record.

Typical crontab usage:

    backup.sh 2>&1 | cronlog capture --app backup --code $?

Rules:
------
- Input must arrive through a pipe; a terminal or regular file is rejected
- Empty output is a no-op: nothing is stored and it is not an error
- An application name is required before the store is touched
"""

import logging
import os
import stat
import sys
from typing import BinaryIO, Optional

from .errors import CaptureError, InvalidArgumentError
from .models import OperationResult
from .storage import ResultStore

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4 * 1024


def is_pipe(stream: BinaryIO) -> bool:
    """Check whether a stream's file descriptor refers to a pipe or FIFO."""
    try:
        mode = os.fstat(stream.fileno()).st_mode
    except (OSError, ValueError) as e:
        raise CaptureError(f"Cannot inspect input stream: {e}") from e
    return stat.S_ISFIFO(mode)


def read_pipe(stream: Optional[BinaryIO] = None) -> bytes:
    """
    Read everything from a piped input stream.

    Args:
        stream: Binary stream to read (defaults to the binary stdin)

    Returns:
        All bytes read until EOF (possibly empty)

    Raises:
        CaptureError: If the stream is not a pipe or reading fails
    """
    if stream is None:
        stream = sys.stdin.buffer

    if not is_pipe(stream):
        raise CaptureError("stdin must be a pipe")

    chunks = []
    try:
        while True:
            chunk = stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
    except (OSError, ValueError) as e:
        raise CaptureError(f"Cannot read input: {e}") from e

    return b"".join(chunks)


def capture_result(
    store: ResultStore,
    application: str,
    exit_code: int,
    payload: bytes,
) -> Optional[OperationResult]:
    """
    Store the captured output of a finished job.

    Args:
        store: Result store to write to
        application: Name of the job that produced the output
        exit_code: Exit status of the job; zero means success
        payload: Captured output bytes

    Returns:
        The stored record, or None if the payload was empty

    Raises:
        InvalidArgumentError: If no application name was supplied
        StorageError: If the store rejects the write
    """
    if not application:
        raise InvalidArgumentError("capture", "application", "no application name supplied")

    if not payload:
        logger.info(f"No output captured for '{application}', nothing stored")
        return None

    return store.create(OperationResult(
        application=application,
        success=exit_code == 0,
        output=payload.decode("utf-8", errors="replace"),
    ))

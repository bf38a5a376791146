"""Filesystem primitives.

move() prefers an atomic rename and only falls back to copying when the
destination lives on another device. copy() never leaves a truncated
destination behind.
"""

import errno
import logging
import os
import shutil

log = logging.getLogger(__name__)


def copy(src: str, dst: str) -> None:
    """Copy src to dst, removing dst if the copy fails part way.

    Raises:
        OSError: If either file cannot be opened, or the copy fails
    """
    with open(src, "rb") as fin:
        fout = open(dst, "wb")
        try:
            with fout:
                shutil.copyfileobj(fin, fout)
        except BaseException:
            try:
                os.remove(dst)
            except FileNotFoundError:
                pass
            raise


def move(src: str, dst: str) -> None:
    """Rename src to dst, copying across devices when rename cannot.

    Raises:
        OSError: For any rename failure other than EXDEV, or if the
            fallback copy or source removal fails
    """
    try:
        os.rename(src, dst)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    log.debug("Cross-device move, copying: %s -> %s", src, dst)
    copy(src, dst)
    os.remove(src)

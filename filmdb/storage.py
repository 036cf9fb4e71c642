"""
存储模块 (Storage Module)
========================

引擎只负责 bytes 与记录之间的转换，文件读写由存储协作方完成：

Storage         – 抽象接口：load() -> bytes，save(bytes)
LocalFileStorage – 本地文件实现，写入临时文件后原子替换
AutoSaveQueue   – 自动保存队列：单个后台线程按提交顺序逐个执行保存，
                  同一时刻最多只有一个写操作
"""

import os
import queue
import tempfile
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from pathlib import Path
from typing import NamedTuple, Optional, Union

from filmdb.errors import StorageError, StorageNotFound
from filmdb.logger import get_logger

logger = get_logger(__name__)


class Storage(ABC):
    """
    存储协作方抽象基类。

    提供标准接口:
    - load(): 读取整个工作簿，不存在时抛出 StorageNotFound
    - save(): 写入整个工作簿，失败时抛出 StorageError
    """

    @abstractmethod
    def load(self) -> bytes:
        pass

    @abstractmethod
    def save(self, data: bytes) -> None:
        pass

    def describe(self) -> str:
        return type(self).__name__


class LocalFileStorage(Storage):
    """本地文件存储。"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError as exc:
            raise StorageNotFound(f"Workbook not found: {self.path}") from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc

    def save(self, data: bytes) -> None:
        """写入同目录下的临时文件，再用 os.replace 原子替换目标文件。"""
        directory = self.path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.info("Saved %d bytes to %s", len(data), self.path)

    def describe(self) -> str:
        return str(self.path)


class _SaveJob(NamedTuple):
    data: bytes
    label: str
    future: Future


class AutoSaveQueue:
    """
    先进先出的自动保存队列。

    每次 submit() 返回一个 Future；保存在前一个保存结束后才开始，
    因此写入严格按提交顺序执行且互不交错。保存失败只记录日志并
    通过 Future 报告，不会抛给提交方。
    """

    def __init__(self, storage: Storage):
        self._storage = storage
        self._queue: "queue.Queue[Optional[_SaveJob]]" = queue.Queue()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="filmdb-autosave", daemon=True)
        self._worker.start()

    @property
    def storage(self) -> Storage:
        return self._storage

    def submit(self, data: bytes, label: str = "save") -> Future:
        """
        排队保存 data。

        返回:
            Future：成功时结果为 True，失败时携带存储异常
        """
        if self._closed:
            raise StorageError("AutoSaveQueue is closed")
        future: Future = Future()
        self._queue.put(_SaveJob(data, label, future))
        logger.debug("Queued %s (%d bytes)", label, len(data))
        return future

    def join(self) -> None:
        """阻塞直到所有已提交的保存结束（成功或失败）。"""
        self._queue.join()

    def close(self) -> None:
        """等待已排队的保存完成后停止后台线程。"""
        if self._closed:
            return
        self._closed = True
        self._queue.put(None)
        self._worker.join()

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                if not job.future.set_running_or_notify_cancel():
                    continue
                try:
                    self._storage.save(job.data)
                except Exception as exc:
                    logger.error("[autosave] %s failed: %s", job.label, exc)
                    job.future.set_exception(exc)
                else:
                    logger.info("[autosave] %s saved to %s", job.label, self._storage.describe())
                    job.future.set_result(True)
            finally:
                self._queue.task_done()

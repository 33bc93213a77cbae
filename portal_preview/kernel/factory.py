from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional, Protocol

from .http import PreviewRequest, Response
from .website import DEBUG_ENVIRONMENTS, Controller, WebsiteKernel, create_template_environment

LOGGER = logging.getLogger(__name__)

__all__ = ["Kernel", "KernelFactory"]


class Kernel(Protocol):
    def handle(self, request: PreviewRequest, request_type: int = ..., catch: bool = ...) -> Response:
        ...


class KernelFactory:
    """Creates one website kernel per environment name and reuses it."""

    def __init__(
        self,
        template_dirs: Iterable[Path] = (),
        controllers: Optional[Mapping[str, Controller]] = None,
        builder: Optional[Callable[[str], Kernel]] = None,
    ) -> None:
        self.template_dirs = tuple(Path(path) for path in template_dirs)
        self._controllers = dict(controllers) if controllers is not None else None
        self._builder = builder or self._build
        self._kernels: Dict[str, Kernel] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def create(self, environment: str) -> Kernel:
        kernel = self._kernels.get(environment)
        if kernel is not None:
            return kernel

        with self._lock:
            lock = self._locks.setdefault(environment, threading.Lock())
        with lock:
            # Another thread might have built the kernel while we waited.
            kernel = self._kernels.get(environment)
            if kernel is None:
                LOGGER.info("Booting website kernel for environment '%s'", environment)
                kernel = self._builder(environment)
                self._kernels[environment] = kernel
            return kernel

    def _build(self, environment: str) -> Kernel:
        templates = create_template_environment(
            self.template_dirs,
            debug=environment in DEBUG_ENVIRONMENTS,
        )
        return WebsiteKernel(environment, templates, self._controllers)

"""In-process website kernel used to render previews."""

from .factory import Kernel, KernelFactory
from .http import MAIN_REQUEST, SUB_REQUEST, PreviewRequest, Response
from .website import ATTRIBUTES_KEY, ContentController, WebsiteKernel, create_template_environment

__all__ = [
    "ATTRIBUTES_KEY",
    "MAIN_REQUEST",
    "SUB_REQUEST",
    "ContentController",
    "Kernel",
    "KernelFactory",
    "PreviewRequest",
    "Response",
    "WebsiteKernel",
    "create_template_environment",
]

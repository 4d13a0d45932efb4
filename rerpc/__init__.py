"""reRPC - protobuf RPC over plain HTTP, with a protoc stub generator."""

from importlib.metadata import PackageNotFoundError, version

from .runtime import SUPPORTS_CODEGEN_V0 as SUPPORTS_CODEGEN_V0
from .runtime import VERSION as VERSION
from .runtime import CallConfig as CallConfig
from .runtime import CallOption as CallOption
from .runtime import Client as Client
from .runtime import Code as Code
from .runtime import Context as Context
from .runtime import Doer as Doer
from .runtime import Error as Error
from .runtime import Handler as Handler
from .runtime import HandlerConfig as HandlerConfig
from .runtime import HandlerOption as HandlerOption
from .runtime import Message as Message
from .runtime import ServeMux as ServeMux
from .runtime import UnaryImplementation as UnaryImplementation
from .runtime import errorf as errorf
from .runtime import with_headers as with_headers
from .runtime import with_read_max_bytes as with_read_max_bytes
from .runtime import with_timeout as with_timeout

try:
    __version__ = version("rerpc")
except PackageNotFoundError:
    __version__ = "(local)"

"""Runtime support imported by generated reRPC modules."""

from google.protobuf.message import Message as Message

from .client import Client as Client
from .client import Doer as Doer
from .errors import Code as Code
from .errors import Error as Error
from .errors import errorf as errorf
from .handler import Handler as Handler
from .handler import ServeMux as ServeMux
from .handler import UnaryImplementation as UnaryImplementation
from .options import CallConfig as CallConfig
from .options import CallOption as CallOption
from .options import Context as Context
from .options import HandlerConfig as HandlerConfig
from .options import HandlerOption as HandlerOption
from .options import with_headers as with_headers
from .options import with_read_max_bytes as with_read_max_bytes
from .options import with_timeout as with_timeout

VERSION = "0.1.0"

# Generated code refers to this constant. Removing or renaming it makes
# modules generated for an incompatible runtime fail at import.
SUPPORTS_CODEGEN_V0 = True

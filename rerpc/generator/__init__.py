"""reRPC stub generator."""

from .naming import unary_methods as unary_methods
from .parser import ValidationError as ValidationError
from .parser import load as load
from .parser import parse as parse
from .python import render as render
from .types import *

"""Method filtering and the naming conventions shared by client and server code.

Every name here is derived from descriptor names by case changes and fixed
affixes only, so regenerating from the same descriptors yields the same names.
"""

import keyword

from .types import MethodDescriptor, ServiceDescriptor

SUFFIX = "ReRPC"


def unary_methods(service: ServiceDescriptor) -> list[MethodDescriptor]:
    """Methods with neither client nor server streaming, in declaration order."""
    return [m for m in service.methods if not (m.client_streaming or m.server_streaming)]


def unexport(name: str) -> str:
    """Lower-case the first character: "GreeterClient" -> "greeterClient"."""
    return name[:1].lower() + name[1:]


def py_ident(name: str) -> str:
    """Make a proto identifier safe to use as a Python name."""
    if keyword.iskeyword(name):
        return name + "_"
    return name


def client_name(service: ServiceDescriptor) -> str:
    return f"{service.name}Client{SUFFIX}"


def concrete_client_name(service: ServiceDescriptor) -> str:
    return unexport(client_name(service))


def client_constructor_name(service: ServiceDescriptor) -> str:
    return f"New{client_name(service)}"


def server_name(service: ServiceDescriptor) -> str:
    return f"{service.name}Server{SUFFIX}"


def unimplemented_name(service: ServiceDescriptor) -> str:
    return f"Unimplemented{server_name(service)}"


def must_embed_name(service: ServiceDescriptor) -> str:
    return f"mustEmbed{unimplemented_name(service)}"


def handler_constructor_name(service: ServiceDescriptor) -> str:
    return f"New{service.name}Handler{SUFFIX}"


def method_ident(method: MethodDescriptor) -> str:
    """Python name of the interface method generated for an RPC."""
    return py_ident(method.name)


def client_field_name(method: MethodDescriptor) -> str:
    """Attribute of the concrete client that holds the method's rerpc.Client."""
    return "_" + unexport(method.name)


def client_param_name(method: MethodDescriptor) -> str:
    """Constructor parameter of the concrete client for the method."""
    name = py_ident(unexport(method.name))
    return name + "_" if name == "self" else name


def adapter_name(method: MethodDescriptor) -> str:
    """Local name of the typed dispatch adapter inside the handler constructor."""
    return "_" + unexport(method.name)


def method_path(service: ServiceDescriptor, method: MethodDescriptor) -> str:
    """Path of a method, shared by client URLs and server routes.

    "acme.v1.Greeter/Greet" for method Greet of service acme.v1.Greeter.
    """
    return f"{service.full_name}/{method.name}"


def route_path(service: ServiceDescriptor, method: MethodDescriptor) -> str:
    return "/" + method_path(service, method)


def service_path(service: ServiceDescriptor) -> str:
    """Prefix under which a service's routes are mounted."""
    return f"/{service.full_name}/"


def module_alias(module: str) -> str:
    """Collision-free local alias for an imported module.

    "a.b.c_pb2" -> "a_dot_b_dot_c__pb2". Doubling underscores first keeps
    "a_b.c" and "a.b_c" apart.
    """
    return module.replace("_", "__").replace(".", "_dot_")

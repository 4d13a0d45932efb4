"""Tests for method filtering and naming conventions."""

from rerpc.generator.naming import (
    client_constructor_name,
    client_name,
    client_param_name,
    concrete_client_name,
    handler_constructor_name,
    method_ident,
    method_path,
    module_alias,
    must_embed_name,
    py_ident,
    route_path,
    server_name,
    service_path,
    unary_methods,
    unexport,
    unimplemented_name,
)
from rerpc.generator.types import MessageRef, MethodDescriptor, ServiceDescriptor

REQUEST = MessageRef(full_name="acme.v1.Request", py_module="acme.v1.api_pb2", py_name="Request")
REPLY = MessageRef(full_name="acme.v1.Reply", py_module="acme.v1.api_pb2", py_name="Reply")


def method(name, client_streaming=False, server_streaming=False):
    return MethodDescriptor(
        name=name,
        full_name=f"acme.v1.Greeter.{name}",
        input=REQUEST,
        output=REPLY,
        client_streaming=client_streaming,
        server_streaming=server_streaming,
    )


def service(*methods, name="Greeter"):
    return ServiceDescriptor(
        name=name,
        full_name=f"acme.v1.{name}",
        package="acme.v1",
        methods=list(methods),
    )


def describe_unary_methods():
    def keeps_only_non_streaming_methods(expect):
        svc = service(
            method("Greet"),
            method("Upload", client_streaming=True),
            method("Watch", server_streaming=True),
            method("Chat", client_streaming=True, server_streaming=True),
            method("Bye"),
        )
        expect([m.name for m in unary_methods(svc)]) == ["Greet", "Bye"]

    def preserves_declaration_order(expect):
        svc = service(method("Zeta"), method("Alpha"), method("Mid"))
        expect([m.name for m in unary_methods(svc)]) == ["Zeta", "Alpha", "Mid"]

    def returns_empty_list_when_everything_streams(expect):
        svc = service(method("Watch", server_streaming=True))
        expect(unary_methods(svc)) == []

    def does_not_modify_the_service(expect):
        svc = service(method("Greet"), method("Watch", server_streaming=True))
        unary_methods(svc)
        expect(len(svc.methods)) == 2


def describe_names():
    def derives_client_names(expect):
        svc = service()
        expect(client_name(svc)) == "GreeterClientReRPC"
        expect(concrete_client_name(svc)) == "greeterClientReRPC"
        expect(client_constructor_name(svc)) == "NewGreeterClientReRPC"

    def derives_server_names(expect):
        svc = service()
        expect(server_name(svc)) == "GreeterServerReRPC"
        expect(unimplemented_name(svc)) == "UnimplementedGreeterServerReRPC"
        expect(must_embed_name(svc)) == "mustEmbedUnimplementedGreeterServerReRPC"
        expect(handler_constructor_name(svc)) == "NewGreeterHandlerReRPC"

    def unexports_only_the_first_character(expect):
        expect(unexport("HTTPGateway")) == "hTTPGateway"
        expect(unexport("x")) == "x"
        expect(unexport("")) == ""

    def escapes_python_keywords(expect):
        expect(py_ident("None")) == "None_"
        expect(py_ident("import")) == "import_"
        expect(py_ident("match")) == "match"
        expect(method_ident(method("True"))) == "True_"

    def never_names_a_client_parameter_self(expect):
        expect(client_param_name(method("Self"))) == "self_"
        expect(client_param_name(method("Greet"))) == "greet"


def describe_paths():
    def joins_service_and_method(expect):
        svc = service(method("Greet"))
        expect(method_path(svc, svc.methods[0])) == "acme.v1.Greeter/Greet"
        expect(route_path(svc, svc.methods[0])) == "/acme.v1.Greeter/Greet"

    def mounts_services_under_their_full_name(expect):
        expect(service_path(service())) == "/acme.v1.Greeter/"

    def route_paths_live_under_the_mount_path(expect):
        svc = service(method("Greet"), method("Bye"))
        for m in svc.methods:
            expect(route_path(svc, m).startswith(service_path(svc))) == True

    def handles_services_without_package(expect):
        svc = ServiceDescriptor(name="Greeter", full_name="Greeter", package="", methods=[method("Greet")])
        expect(route_path(svc, svc.methods[0])) == "/Greeter/Greet"


def describe_module_alias():
    def replaces_dots(expect):
        expect(module_alias("acme.v1.api_pb2")) == "acme_dot_v1_dot_api__pb2"

    def keeps_similar_modules_apart(expect):
        expect(module_alias("a_b.c_pb2") != module_alias("a.b_c_pb2")) == True

    def handles_top_level_modules(expect):
        expect(module_alias("echo_pb2")) == "echo__pb2"

"""Tests for the .proto parser and loader."""

import pytest

from rerpc.generator import load, parse
from rerpc.generator.parser import ValidationError


def describe_parse_services():
    def parses_unary_and_streaming_rpcs(expect):
        parsed = parse(
            """
            syntax = "proto3";
            package acme.v1;

            service Greeter {
                rpc Greet(Req) returns (Rep);
                rpc Upload(stream Req) returns (Rep);
                rpc Watch(Req) returns (stream Rep);
                rpc Chat(stream Req) returns (stream Rep) {}
            }
        """
        )
        expect(parsed.package) == "acme.v1"
        expect(len(parsed.services)) == 1

        rpcs = parsed.services[0].rpcs
        expect([r.name for r in rpcs]) == ["Greet", "Upload", "Watch", "Chat"]
        expect([(r.client_streaming, r.server_streaming) for r in rpcs]) == [
            (False, False),
            (True, False),
            (False, True),
            (True, True),
        ]
        expect(rpcs[0].input_type) == "Req"
        expect(rpcs[0].output_type) == "Rep"

    def parses_deprecation_options(expect):
        parsed = parse(
            """
            syntax = "proto3";
            option deprecated = true;

            service Old {
                option deprecated = true;
                rpc Ping(P) returns (P) { option deprecated = true; }
                rpc Pong(P) returns (P) { option deprecated = false; }
            }
        """
        )
        service = parsed.services[0]
        expect(parsed.deprecated) == True
        expect(service.deprecated) == True
        expect(service.rpcs[0].deprecated) == True
        expect(service.rpcs[1].deprecated) == False

    def treats_missing_options_as_not_deprecated(expect):
        parsed = parse("service S { rpc M(A) returns (B); }")
        expect(parsed.deprecated) == False
        expect(parsed.services[0].deprecated) == False
        expect(parsed.services[0].rpcs[0].deprecated) == False

    def parses_aggregate_option_values(expect):
        parsed = parse(
            """
            service S {
                rpc M(A) returns (B) {
                    option (google.api.http) = { post: "/v1/m" body: "*" nested { x: 1 } };
                    option deprecated = true;
                }
            }
        """
        )
        expect(parsed.services[0].rpcs[0].deprecated) == True

    def records_rpc_positions(expect):
        parsed = parse('syntax = "proto3";\n\nservice S {\n  rpc M(A) returns (B);\n}\n')
        service = parsed.services[0]
        expect(service.span[0]) == 2
        expect(service.rpcs[0].span[0]) == 3

    def parses_multiple_services_in_order(expect):
        parsed = parse(
            """
            service B { rpc M(X) returns (X); }
            service A { }
        """
        )
        expect([s.name for s in parsed.services]) == ["B", "A"]
        expect(parsed.services[1].rpcs) == []


def describe_parse_messages():
    def collects_nested_message_names(expect):
        parsed = parse(
            """
            syntax = "proto3";
            package acme.v1;

            message Outer {
                message Inner {
                    message Deepest {}
                }
                enum Kind { KIND_UNSPECIFIED = 0; }
                Inner inner = 1;
            }
            message Other {}
        """,
            "acme/v1/things.proto",
        )
        names = [(m.full_name, m.py_name) for m in parsed.messages]
        expect(names) == [
            ("acme.v1.Outer", "Outer"),
            ("acme.v1.Outer.Inner", "Outer.Inner"),
            ("acme.v1.Outer.Inner.Deepest", "Outer.Inner.Deepest"),
            ("acme.v1.Other", "Other"),
        ]
        expect(parsed.messages[0].py_module) == "acme.v1.things_pb2"

    def parses_message_body_syntax(expect):
        parsed = parse(
            """
            syntax = "proto2";
            message Everything {
                required string a = 1;
                optional int32 b = 2 [default = -5, deprecated = true];
                repeated .pkg.Other c = 3;
                map<string, Everything> d = 4;
                oneof choice {
                    string e = 5;
                    bytes f = 6;
                }
                optional group G = 7 { optional int32 h = 8; }
                extensions 100 to max;
                reserved 9, 10 to 12;
                reserved "old";
                option message_set_wire_format = false;
                ;
            }
            extend Everything { optional string ext = 101; }
            enum E { option allow_alias = true; A = 0; B = 0; C = -1; }
        """
        )
        expect([m.full_name for m in parsed.messages]) == ["Everything"]

    def skips_comments(expect):
        parsed = parse(
            """
            // line comment
            /* block
               comment */
            message M { string a = 1; // trailing
            }
        """
        )
        expect(len(parsed.messages)) == 1

    def collects_imports(expect):
        parsed = parse(
            """
            import "a.proto";
            import public "b.proto";
            import weak "c.proto";
        """
        )
        expect(parsed.imports) == ["a.proto", "b.proto", "c.proto"]


def describe_leading_comments():
    def attaches_line_comments_to_rpcs(expect):
        parsed = parse(
            """
service S {
  // Greet greets.
  // Twice.
  rpc Greet(A) returns (B);
}
"""
        )
        expect(parsed.services[0].rpcs[0].leading_comments) == " Greet greets.\n Twice.\n"

    def attaches_block_comments_to_services(expect):
        parsed = parse(
            """
/* Greeter
 * says hello.
 */
service Greeter {}
"""
        )
        expect(parsed.services[0].leading_comments) == " Greeter\n says hello.\n"

    def detaches_comments_separated_by_a_blank_line(expect):
        parsed = parse(
            """
// Not about S.

service S {
  // Not about M either.

  rpc M(A) returns (B);
}
"""
        )
        expect(parsed.services[0].leading_comments) == None
        expect(parsed.services[0].rpcs[0].leading_comments) == None

    def ignores_trailing_comments_of_the_previous_line(expect):
        parsed = parse(
            """
service S {
  rpc A(X) returns (Y); // about A
  rpc B(X) returns (Y);
}
"""
        )
        expect([r.leading_comments for r in parsed.services[0].rpcs]) == [None, None]

    def ignores_comment_markers_inside_strings(expect):
        parsed = parse(
            """
option go_package = "example.com/acme//v1";
service S {
  option (opens) = "/*";
  // M is real.
  rpc M(A) returns (B);
  option (closes) = "*/";
}
"""
        )
        expect(parsed.services[0].leading_comments) == None
        expect(parsed.services[0].rpcs[0].leading_comments) == " M is real.\n"


def describe_validation():
    def rejects_duplicate_services(expect):
        with pytest.raises(ValidationError) as exc:
            parse("service S {} service S {}")
        expect("declared twice" in str(exc.value)) == True

    def rejects_duplicate_methods(expect):
        with pytest.raises(ValidationError) as exc:
            parse("service S { rpc M(A) returns (B); rpc M(A) returns (B); }")
        expect("method M" in str(exc.value)) == True


def describe_parse_errors():
    def rejects_invalid_syntax(expect):
        with pytest.raises(Exception):
            parse("this is not valid syntax")

    def rejects_unclosed_brace(expect):
        with pytest.raises(Exception):
            parse("service S { rpc M(A) returns (B);")


def describe_load():
    def resolves_local_and_well_known_types(expect, protos_dir):
        file = load(protos_dir / "acme/greeter/v1/greeter.proto", [protos_dir])
        expect(file.path) == "acme/greeter/v1/greeter.proto"
        expect(file.package) == "acme.greeter.v1"

        greeter = file.services[0]
        expect(greeter.full_name) == "acme.greeter.v1.Greeter"
        expect([m.name for m in greeter.methods]) == ["Greet", "Chat", "Shout"]

        greet = greeter.methods[0]
        expect(greet.full_name) == "acme.greeter.v1.Greeter.Greet"
        expect(greet.input.full_name) == "acme.greeter.v1.GreetRequest"
        expect(greet.input.py_module) == "acme.greeter.v1.greeter_pb2"
        expect(greet.output.py_name) == "GreetReply"

        shout = greeter.methods[2]
        expect(shout.deprecated) == True
        expect(shout.input.py_module) == "google.protobuf.wrappers_pb2"
        expect(shout.output.full_name) == "google.protobuf.StringValue"

    def records_source_paths(expect, protos_dir):
        file = load(protos_dir / "acme/greeter/v1/greeter.proto", [protos_dir])
        greeter = file.services[0]
        expect(greeter.location.path) == [6, 0]
        expect(greeter.methods[1].location.path) == [6, 0, 2, 1]

    def resolves_imports_from_include_paths(expect, tmp_path, protos_dir):
        (tmp_path / "pinger.proto").write_text(
            """
            syntax = "proto3";
            package acme.ping.v1;
            import "messages.proto";
            service Pinger {
                rpc Ping(types.Ping) returns (acme.types.Ping);
            }
        """
        )
        file = load(tmp_path / "pinger.proto", [tmp_path, protos_dir])
        ping = file.services[0].methods[0]
        expect(ping.input.full_name) == "acme.types.Ping"
        expect(ping.input.py_module) == "messages_pb2"
        expect(ping.output) == ping.input

    def rejects_unknown_types(expect, tmp_path):
        (tmp_path / "bad.proto").write_text("service S { rpc M(Missing) returns (Missing); }")
        with pytest.raises(ValidationError) as exc:
            load(tmp_path / "bad.proto", [tmp_path])
        expect("Missing" in str(exc.value)) == True

    def rejects_missing_imports(expect, tmp_path):
        (tmp_path / "bad.proto").write_text('import "nowhere/to/be/found.proto";')
        with pytest.raises(ValidationError) as exc:
            load(tmp_path / "bad.proto", [tmp_path])
        expect("nowhere/to/be/found.proto" in str(exc.value)) == True

    def records_leading_comments(expect, protos_dir):
        file = load(protos_dir / "acme/greeter/v1/greeter.proto", [protos_dir])
        greeter = file.services[0]
        expect(greeter.location.leading_comments) == " Greeter says hello. "
        expect(greeter.methods[0].location.leading_comments) == " Greet greets.\n"
        expect(greeter.methods[1].location.leading_comments) == None

    def rejects_files_outside_the_include_paths(expect, tmp_path, protos_dir):
        (tmp_path / "loose.proto").write_text("service S {}")
        with pytest.raises(ValidationError) as exc:
            load(tmp_path / "loose.proto", [protos_dir])
        expect("not inside any include path" in str(exc.value)) == True

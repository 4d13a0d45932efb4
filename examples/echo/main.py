"""Serve the Echo service and call it.

Regenerate the stubs with:

    rerpc gen -i echo.proto -o echo_rerpc.py

Run in-process (no sockets):

    python main.py

Or serve on a port and call it from another terminal:

    python main.py --serve 8080
    python main.py --url http://localhost:8080
"""

from wsgiref.simple_server import make_server

import click
import httpx
from echo_rerpc import NewEchoClientReRPC, NewEchoHandlerReRPC, UnimplementedEchoServerReRPC
from google.protobuf import wrappers_pb2
from rich.console import Console

import rerpc

console = Console()


class EchoServer(UnimplementedEchoServerReRPC):
    def Echo(self, ctx, req):
        return req

    def Count(self, ctx, req):
        if not req.value:
            raise rerpc.errorf(rerpc.Code.INVALID_ARGUMENT, "nothing to count")
        return wrappers_pb2.Int64Value(value=len(req.value))


@click.command()
@click.option("--serve", "port", type=int, help="Serve on this port instead of calling")
@click.option("--url", help="Call a server at this base URL instead of in-process")
def main(port: int | None, url: str | None) -> None:
    path, mux = NewEchoHandlerReRPC(EchoServer())

    if port:
        console.print(f"serving {path} on port {port}")
        make_server("", port, mux).serve_forever()
        return

    if url:
        doer = httpx.Client()
    else:
        doer = httpx.Client(transport=httpx.WSGITransport(app=mux))
        url = "http://echo.local"

    client = NewEchoClientReRPC(url, doer, rerpc.with_timeout(5))
    ctx = rerpc.Context()

    res = client.Echo(ctx, wrappers_pb2.StringValue(value="hello"))
    console.print(f"Echo  -> {res.value!r}")

    count = client.Count(ctx, wrappers_pb2.StringValue(value="hello"))
    console.print(f"Count -> {count.value}")

    try:
        client.Count(ctx, wrappers_pb2.StringValue())
    except rerpc.Error as err:
        console.print(f"[red]Count failed:[/red] {err}")


if __name__ == "__main__":
    main()

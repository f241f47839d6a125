"""The class server: TCP sessions for students and teachers, UDP for administrators."""

from __future__ import annotations

import argparse
import logging
import re
import selectors
import socket
import sys
import threading
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence

from .classes import ClassRegistry
from .errors import Rejected
from .users import User, UserStore

log = logging.getLogger(__name__)

MAX_BUF_SIZE = 512
LISTEN_BACKLOG = 5
POLL_INTERVAL = 0.2

TCP_OK = "OK"
TCP_ADMIN = "ADMIN"
UDP_OK = "OK"
UDP_CLIENT = "CLIENT"
LOGIN_REJECTED = "REJECTED"


class EndSession(Exception):
    """Raised when the peer asks to end its session."""


class _Stage(Enum):
    USERNAME = auto()
    PASSWORD = auto()
    ADMIN = auto()


@dataclass
class _AdminSession:
    stage: _Stage = _Stage.USERNAME
    username: str = ""


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _tokens(line: str) -> list:
    return [token for token in line.split(" ") if token]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").split("\0", 1)[0]


def _tcp_reply(user: Optional[User]) -> str:
    if user is None:
        return LOGIN_REJECTED
    return TCP_ADMIN if user.is_admin else TCP_OK


def _udp_reply(user: Optional[User]) -> str:
    if user is None:
        return LOGIN_REJECTED
    return UDP_OK if user.is_admin else UDP_CLIENT


class ClassServer:
    """Serves students and teachers over TCP and administrators over UDP."""

    def __init__(self, users: UserStore, registry: ClassRegistry) -> None:
        self.users = users
        self.registry = registry
        self.ready = threading.Event()
        self.tcp_address: Optional[tuple] = None
        self.udp_address: Optional[tuple] = None
        self._stop = threading.Event()
        self._udp_sessions: dict = {}

    def login_tcp(self, username: str, password: str) -> str:
        """Return the TCP login reply: OK, ADMIN or REJECTED."""
        log.info("(TCP CLIENT) LOGIN %s", username)
        return _tcp_reply(self.users.authenticate(username, password))

    def login_udp(self, username: str, password: str) -> str:
        """Return the UDP login reply: OK, CLIENT or REJECTED."""
        log.info("(UDP CLIENT) LOGIN %s", username)
        return _udp_reply(self.users.authenticate(username, password))

    def handle_client_command(self, username: str, line: str) -> Optional[str]:
        """Answer one command of a student or teacher; None means no reply."""
        if not line:
            return None
        log.info("(TCP CLIENT) %s", line)
        if line == "EXIT":
            raise EndSession
        try:
            if line == "LIST_CLASSES":
                return self.registry.listing()
            if line == "LIST_SUBSCRIBED":
                return self.registry.subscribed_listing(username)
            if "SUBSCRIBE_CLASS" in line:
                _, _, name = line.partition(" ")
                turma = self.registry.subscribe(username, name)
                return f"ACCEPTED <{turma.multicast}>"
            if "CREATE_CLASS" in line:
                tokens = _tokens(line)
                if len(tokens) < 3:
                    raise Rejected("INVALID ARGUMENTS")
                turma = self.registry.create(tokens[1], _atoi(tokens[2]))
                return f"OK <{turma.multicast}>\n"
            if "SEND" in line:
                parts = line.split(None, 2)
                name = parts[1] if len(parts) > 1 else ""
                content = parts[2] if len(parts) > 2 else ""
                self.registry.send(name, content)
                return "SENT\n"
        except Rejected as exc:
            return exc.reply()
        return None

    def handle_admin_command(self, line: str) -> Optional[str]:
        """Answer one administrator command; None means no reply."""
        if not line:
            return None
        log.info("(UDP CLIENT) %s", line)
        if line == "EXIT":
            raise EndSession
        try:
            if "ADD_USER" in line:
                tokens = _tokens(line)
                if len(tokens) < 4:
                    raise Rejected("INVALID ARGUMENTS")
                self.users.add(tokens[1], tokens[2], tokens[3])
                return "ACCEPTED\n"
            if "DEL" in line:
                _, _, username = line.partition(" ")
                self.users.remove(username)
                return "REMOVED\n"
            if line == "LIST":
                return self.users.listing()
            if line == "QUIT_SERVER":
                self.shutdown()
                raise EndSession
        except Rejected as exc:
            return exc.reply()
        return None

    def serve_forever(self, tcp_port: int, udp_port: int) -> None:
        """Listen on both ports until :meth:`shutdown` is called."""
        self._stop.clear()
        with ExitStack() as stack:
            tcp = stack.enter_context(socket.socket(socket.AF_INET, socket.SOCK_STREAM))
            tcp.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            udp = stack.enter_context(
                socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            )
            tcp.bind(("", tcp_port))
            udp.bind(("", udp_port))
            tcp.listen(LISTEN_BACKLOG)
            self.tcp_address = tcp.getsockname()
            self.udp_address = udp.getsockname()
            selector = stack.enter_context(selectors.DefaultSelector())
            selector.register(tcp, selectors.EVENT_READ)
            selector.register(udp, selectors.EVENT_READ)
            log.info("A aguardar conexões em 'PORTO_TURMAS' e 'PORTO_CONFIG'...")
            self.ready.set()
            try:
                while not self._stop.is_set():
                    for key, _ in selector.select(POLL_INTERVAL):
                        if key.fileobj is tcp:
                            self._accept(tcp)
                        else:
                            self._handle_datagram(udp)
            finally:
                self.ready.clear()
                self._udp_sessions.clear()

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to stop."""
        log.info("A encerrar o servidor...")
        self._stop.set()

    def _accept(self, listener: socket.socket) -> None:
        conn, _ = listener.accept()
        log.info("Conexão aceite em 'PORTO_TURMAS'!")
        threading.Thread(target=self._tcp_session, args=(conn,), daemon=True).start()

    def _tcp_login(self, conn: socket.socket) -> Optional[User]:
        while True:
            username = conn.recv(MAX_BUF_SIZE)
            if not username:
                return None
            password = conn.recv(MAX_BUF_SIZE)
            if not password:
                return None
            name = _decode(username)
            log.info("(TCP CLIENT) LOGIN %s", name)
            user = self.users.authenticate(name, _decode(password))
            reply = _tcp_reply(user)
            conn.sendall(reply.encode())
            if reply == TCP_OK:
                return user

    def _tcp_session(self, conn: socket.socket) -> None:
        with conn:
            try:
                user = self._tcp_login(conn)
                if user is None:
                    return
                conn.sendall(user.user_type.encode())
                while not self._stop.is_set():
                    data = conn.recv(MAX_BUF_SIZE)
                    if not data:
                        return
                    try:
                        reply = self.handle_client_command(user.username, _decode(data))
                    except EndSession:
                        return
                    if reply is not None:
                        conn.sendall(reply.encode())
            except OSError as exc:
                log.warning("Erro: ao comunicar com o cliente: %s", exc)

    def _handle_datagram(self, sock: socket.socket) -> None:
        data, address = sock.recvfrom(MAX_BUF_SIZE)
        text = _decode(data)
        session = self._udp_sessions.setdefault(address, _AdminSession())
        if session.stage is _Stage.USERNAME:
            session.username = text
            session.stage = _Stage.PASSWORD
            return
        if session.stage is _Stage.PASSWORD:
            log.info("(UDP CLIENT) LOGIN %s", session.username)
            user = self.users.authenticate(session.username, text)
            reply = _udp_reply(user)
            sock.sendto(reply.encode(), address)
            if reply == UDP_OK:
                session.stage = _Stage.ADMIN
                sock.sendto(user.user_type.encode(), address)
            else:
                session.stage = _Stage.USERNAME
            return
        try:
            reply = self.handle_admin_command(text)
        except EndSession:
            self._udp_sessions.pop(address, None)
            return
        if reply is not None:
            sock.sendto(reply.encode(), address)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the class server from the command line."""
    parser = argparse.ArgumentParser(
        prog="class_server",
        description="Serve classes over TCP and administration over UDP.",
    )
    parser.add_argument("tcp_port", type=int, metavar="PORTO_TURMAS")
    parser.add_argument("udp_port", type=int, metavar="PORTO_CONFIG")
    parser.add_argument("config_file", metavar="CONFIG")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        users = UserStore.load(args.config_file)
    except OSError:
        print("Erro: ao abrir o ficheiro de configuração", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 1

    server = ClassServer(users, ClassRegistry())
    try:
        server.serve_forever(args.tcp_port, args.udp_port)
    except KeyboardInterrupt:
        server.shutdown()
    except OSError as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
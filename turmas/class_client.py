"""Interactive TCP client for students and teachers."""

from __future__ import annotations

import argparse
import socket
import sys
from typing import Optional, Sequence, TextIO

MAX_BUFFER_SIZE = 1024
MAX_TYPE_LENGTH = 20
MAX_CLASS_NAME = 50
MAX_TEXT_SIZE = 500

ALUNO = "ALUNO"
PROFESSOR = "PROFESSOR"

LOGIN_OK = "OK"
LOGIN_REJECTED = "REJECTED"
LOGIN_ADMIN = "ADMIN"

OPTION_LIST_CLASSES = 1
OPTION_EXIT = 4

_GREEN = "\033[1;32m"
_RED = "\033[1;31m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

_MENUS = {
    ALUNO: (
        "\n[ 1 ] LIST_CLASSES\n"
        "[ 2 ] LIST_SUBSCRIBED\n"
        "[ 3 ] SUBSCRIBE_CLASS {name}\n"
        "[ 4 ] EXIT\n"
    ),
    PROFESSOR: (
        "\n[ 1 ] LIST_CLASSES\n"
        "[ 2 ] CREATE_CLASS {name} {size}\n"
        "[ 3 ] SEND {name} {text that server will send to subscribers}\n"
        "[ 4 ] EXIT\n"
    ),
}

_LOGIN_FAILURES = {
    LOGIN_REJECTED: f"{_RED}Autenticação falhou. Username ou password incorretos!{_RESET}\n",
    LOGIN_ADMIN: f"{_RED}Autenticação falhou. Impossível autenticar administradores por TCP!{_RESET}\n",
}


def menu_for(client_type: str) -> str:
    """Return the menu of options shown to a client of ``client_type``."""
    kind = client_type.upper()
    header = f"\n{_BLUE}----- OPÇÕES DISPONÍVEIS PARA {kind} -----{_RESET}\n"
    return header + _MENUS.get(kind, "")


def describe_login_reply(reply: str) -> Optional[str]:
    """Return the message shown for a failed login reply, or None otherwise."""
    return _LOGIN_FAILURES.get(reply)


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").split("\0", 1)[0]


class ClassClient:
    """Drives one authenticated session with the class server over TCP."""

    def __init__(
        self,
        sock: socket.socket,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.sock = sock
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _read_line(self, prompt: str, limit: int = MAX_BUFFER_SIZE) -> str:
        self._write(prompt)
        line = self.stdin.readline()
        if not line:
            raise EOFError("end of input")
        return line.rstrip("\r\n")[: limit - 1]

    def _ask(self, prompt: str, limit: int = MAX_BUFFER_SIZE) -> str:
        while True:
            answer = self._read_line(prompt, limit)
            if answer:
                return answer

    def _ask_int(self, prompt: str, low: int, high: Optional[int] = None) -> int:
        while True:
            value = _parse_int(self._read_line(prompt))
            if value is not None and value >= low and (high is None or value <= high):
                return value

    def _send(self, text: str) -> None:
        self.sock.sendall(text.encode("utf-8"))

    def _receive(self, size: int = MAX_BUFFER_SIZE) -> str:
        data = self.sock.recv(size)
        if not data:
            raise ConnectionError("ao receber dados")
        return _decode(data)

    def login(self) -> Optional[str]:
        """Authenticate, retrying after refusals; return the client type in upper case.

        Returns None when the server answers with something unexpected.
        """
        while True:
            self._send(self._ask("\nUsername: "))
            self._send(self._ask("Password: "))
            reply = self._receive()
            if reply == LOGIN_OK:
                client_type = self._receive(MAX_TYPE_LENGTH)
                self._write(f"{_GREEN}Autenticação bem sucedida!{_RESET}\n\n")
                return client_type.upper()
            message = describe_login_reply(reply)
            if message is None:
                return None
            self._write(message)

    def build_request(self, client_type: str, option: int) -> Optional[str]:
        """Ask for the details of ``option`` and return the request to send."""
        kind = client_type.upper()
        if option == OPTION_LIST_CLASSES:
            return "LIST_CLASSES"
        if option == OPTION_EXIT:
            return "EXIT"
        if option == 2:
            if kind == ALUNO:
                return "LIST_SUBSCRIBED"
            if kind == PROFESSOR:
                name = self._ask("Nome da turma: ", MAX_CLASS_NAME)
                capacity = self._ask_int("Capacidade máxima: ", 1)
                return f"CREATE_CLASS {name.lower()} {capacity}"
            return None
        if option == 3:
            if kind == ALUNO:
                name = self._ask("Nome da turma: ", MAX_CLASS_NAME)
                return f"SUBSCRIBE_CLASS {name.lower()}"
            if kind == PROFESSOR:
                name = self._ask("Nome da turma: ", MAX_CLASS_NAME)
                text = self._ask("Texto a enviar: ", MAX_TEXT_SIZE)
                return f"SEND {name.lower()} {text}"
            return None
        raise ValueError(f"invalid option: {option}")

    def run(self) -> None:
        """Log in and serve the menu until the user chooses to exit."""
        client_type = self.login()
        if client_type is None:
            return
        while True:
            self._write(menu_for(client_type))
            option = self._ask_int("\nEscolha uma opção: ", 1, OPTION_EXIT)
            request = self.build_request(client_type, option)
            if request is None:
                continue
            self._send(request)
            if option == OPTION_EXIT:
                self._write("A terminar sessão...\n\n")
                return
            self._write(f"\n{self._receive()}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Connect to the class server and run an interactive session."""
    parser = argparse.ArgumentParser(
        prog="class_client",
        description="Connect to the class server as a student or teacher.",
    )
    parser.add_argument("server", metavar="SERVIDOR")
    parser.add_argument("port", type=int, metavar="PORTO_TURMAS")
    args = parser.parse_args(argv)

    try:
        address = socket.gethostbyname(args.server)
    except OSError:
        print("Erro: não foi possível obter endereço")
        return 1

    try:
        sock = socket.create_connection((address, args.port))
    except OSError:
        print("Erro: ao conectar")
        return 1

    with sock:
        try:
            ClassClient(sock).run()
        except EOFError:
            return 0
        except OSError as exc:
            print(f"Erro: {exc}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
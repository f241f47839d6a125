"""Interactive UDP client for administrators."""

from __future__ import annotations

import argparse
import socket
import sys
from typing import Optional, Sequence, TextIO

MAX_BUFFER_SIZE = 1024
MAX_USERNAME_LENGTH = 50
MAX_PASSWORD_LENGTH = 50
MAX_TYPE_LENGTH = 20

ADMINISTRADOR = "ADMINISTRADOR"
VALID_TYPES = ("administrador", "aluno", "professor")

LOGIN_OK = "OK"
LOGIN_REJECTED = "REJECTED"
LOGIN_CLIENT = "CLIENT"

OPTION_ADD_USER = 1
OPTION_DEL = 2
OPTION_LIST = 3
OPTION_EXIT = 4
OPTION_QUIT_SERVER = 5

_GREEN = "\033[1;32m"
_RED = "\033[1;31m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

_MENU = (
    "\n[ 1 ] ADD_USER {username} {password} {administrador/aluno/professor}\n"
    "[ 2 ] DEL {username}\n"
    "[ 3 ] LIST\n"
    "[ 4 ] EXIT\n"
    "[ 5 ] QUIT_SERVER\n"
)

_LOGIN_FAILURES = {
    LOGIN_REJECTED: f"{_RED}Autenticação falhou. Username ou password incorretos!{_RESET}\n\n",
    LOGIN_CLIENT: (
        f"{_RED}Autenticação falhou. Impossível autenticar clientes "
        f"aluno/professor por UDP!{_RESET}\n\n"
    ),
}

_USERNAME_PROMPT = "\nUsername: "
_CREDENTIAL_PROMPT = "Password: "
_NEW_CREDENTIAL_PROMPT = "Password a adicionar: "


def admin_menu() -> str:
    """Return the menu of options shown to an administrator."""
    header = f"\n{_BLUE}----- OPÇÕES DISPONÍVEIS PARA {ADMINISTRADOR} -----{_RESET}\n"
    return header + _MENU


def describe_login_reply(reply: str) -> Optional[str]:
    """Return the message shown for a failed login reply, or None otherwise."""
    return _LOGIN_FAILURES.get(reply)


def _parse_option(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").split("\0", 1)[0]


class AdminClient:
    """Drives one administrator session with the class server over UDP."""

    def __init__(
        self,
        sock: socket.socket,
        address: tuple,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.sock = sock
        self.address = address
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

    def _send(self, text: str) -> None:
        self.sock.sendto(text.encode("utf-8"), self.address)

    def _receive(self, size: int = MAX_BUFFER_SIZE) -> str:
        data, _ = self.sock.recvfrom(size)
        return _decode(data)

    def login(self) -> Optional[str]:
        """Authenticate, retrying after refusals; return the client type in upper case.

        Returns None when the server answers with something unexpected.
        """
        while True:
            self._send(self._ask(_USERNAME_PROMPT))
            self._send(self._ask(_CREDENTIAL_PROMPT))
            reply = self._receive()
            if reply == LOGIN_OK:
                client_type = self._receive(MAX_TYPE_LENGTH)
                self._write(f"{_GREEN}Autenticação bem sucedida!{_RESET}\n\n")
                return client_type.upper()
            message = describe_login_reply(reply)
            if message is None:
                return None
            self._write(message)

    def build_request(self, option: int) -> str:
        """Ask for the details of ``option`` and return the request to send."""
        if option == OPTION_ADD_USER:
            username = self._ask("Username a adicionar: ", MAX_USERNAME_LENGTH).lower()
            phrase = self._ask(_NEW_CREDENTIAL_PROMPT, MAX_PASSWORD_LENGTH).lower()
            while True:
                user_type = self._read_line("Tipo a adicionar: ", MAX_TYPE_LENGTH).lower()
                if user_type in VALID_TYPES:
                    break
            return f"ADD_USER {username} {phrase} {user_type}"
        if option == OPTION_DEL:
            username = self._ask("Username a remover: ", MAX_USERNAME_LENGTH).lower()
            return f"DEL {username}"
        if option == OPTION_LIST:
            return "LIST"
        if option == OPTION_EXIT:
            return "EXIT"
        if option == OPTION_QUIT_SERVER:
            return "QUIT_SERVER"
        return "INVALID"

    def run(self) -> None:
        """Log in and serve the menu until the user exits or stops the server."""
        client_type = self.login()
        if client_type is None:
            return
        while True:
            self._write(admin_menu())
            option = _parse_option(self._read_line("\nEscolha uma opção: "))
            request = self.build_request(option)
            self._send(request)
            if option == OPTION_EXIT:
                self._write("A terminar sessão...\n\n")
                return
            if option == OPTION_QUIT_SERVER:
                self._write("A terminar sessão e a encerrar servidor...\n\n")
                return
            if request == "INVALID":
                self._write(f"{_RED}Opção inválida!{_RESET}\n")
            self._write(f"\n{self._receive()}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Talk to the class server's administration port interactively."""
    parser = argparse.ArgumentParser(
        prog="admin_client",
        description="Administer the class server over UDP.",
    )
    parser.add_argument("server", metavar="SERVIDOR")
    parser.add_argument("port", type=int, metavar="PORTO_CONFIG")
    args = parser.parse_args(argv)

    try:
        socket.inet_aton(args.server)
    except OSError:
        print("Erro: ao converter endereço")
        return 1

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    except OSError:
        print("Erro: ao criar socket")
        return 1

    with sock:
        try:
            AdminClient(sock, (args.server, args.port)).run()
        except EOFError:
            return 0
        except OSError as exc:
            print(f"Erro: {exc}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
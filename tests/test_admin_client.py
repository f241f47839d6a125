import io

import pytest

from turmas.admin_client import (
    AdminClient,
    admin_menu,
    describe_login_reply,
    main,
)

ADDRESS = ("127.0.0.1", 5000)


class FakeSocket:
    def __init__(self, replies=()):
        self.replies = [r.encode() if isinstance(r, str) else r for r in replies]
        self.sent = []

    def sendto(self, data, address):
        self.sent.append((data, address))
        return len(data)

    def recvfrom(self, size):
        if not self.replies:
            raise ConnectionError("no more replies")
        return self.replies.pop(0)[:size], ADDRESS

    @property
    def messages(self):
        return [data.decode() for data, _ in self.sent]


def make_client(stdin_text, replies=()):
    sock = FakeSocket(replies)
    out = io.StringIO()
    client = AdminClient(sock, ADDRESS, io.StringIO(stdin_text), out)
    return client, sock, out


def test_admin_menu_lists_all_options():
    menu = admin_menu()
    assert "OPÇÕES DISPONÍVEIS PARA ADMINISTRADOR" in menu
    assert "[ 1 ] ADD_USER {username} {password} {administrador/aluno/professor}" in menu
    assert "[ 5 ] QUIT_SERVER" in menu


def test_describe_login_reply():
    assert describe_login_reply("OK") is None
    assert "Username ou password incorretos!" in describe_login_reply("REJECTED")
    assert "aluno/professor por UDP!" in describe_login_reply("CLIENT")


def test_login_success_sends_credentials():
    client, sock, out = make_client("Admin\npassword\n", ["OK", "administrador"])
    assert client.login() == "ADMINISTRADOR"
    assert sock.messages == ["Admin", "password"]
    assert all(address == ADDRESS for _, address in sock.sent)
    assert "Autenticação bem sucedida!" in out.getvalue()


def test_login_skips_blank_lines():
    client, sock, _ = make_client("\nadmin\n\npassword\n", ["OK", "administrador"])
    assert client.login() == "ADMINISTRADOR"
    assert sock.messages == ["admin", "password"]


def test_login_retries_after_rejection():
    client, sock, out = make_client(
        "admin\nwrong\nadmin\npassword\n", ["REJECTED", "OK", "administrador"]
    )
    assert client.login() == "ADMINISTRADOR"
    assert sock.messages == ["admin", "wrong", "admin", "password"]
    assert "incorretos" in out.getvalue()


def test_login_unexpected_reply_returns_none():
    client, _, _ = make_client("admin\npassword\n", ["SOMETHING"])
    assert client.login() is None


def test_login_end_of_input():
    client, _, _ = make_client("")
    with pytest.raises(EOFError):
        client.login()


def test_build_add_user_lowers_fields_and_validates_type():
    client, _, _ = make_client("Bob\nPassword\nfoo\nAluno\n")
    assert client.build_request(1) == "ADD_USER bob password aluno"


def test_build_del_lowers_username():
    client, _, _ = make_client("\nBOB\n")
    assert client.build_request(2) == "DEL bob"


@pytest.mark.parametrize(
    "option, expected",
    [(3, "LIST"), (4, "EXIT"), (5, "QUIT_SERVER"), (0, "INVALID"), (9, "INVALID")],
)
def test_build_simple_requests(option, expected):
    client, _, _ = make_client("")
    assert client.build_request(option) == expected


def test_run_list_then_exit():
    client, sock, out = make_client(
        "admin\npassword\n3\n4\n",
        ["OK", "administrador", "USER admin TYPE administrador\n"],
    )
    client.run()
    assert sock.messages == ["admin", "password", "LIST", "EXIT"]
    text = out.getvalue()
    assert "USER admin TYPE administrador" in text
    assert "A terminar sessão..." in text


def test_run_quit_server():
    client, sock, out = make_client("admin\npassword\n5\n", ["OK", "administrador"])
    client.run()
    assert sock.messages[-1] == "QUIT_SERVER"
    assert "encerrar servidor" in out.getvalue()


def test_run_invalid_option_sends_invalid():
    client, sock, out = make_client(
        "admin\npassword\nabc\n4\n", ["OK", "administrador", ""]
    )
    client.run()
    assert sock.messages == ["admin", "password", "INVALID", "EXIT"]
    assert "Opção inválida!" in out.getvalue()


def test_run_stops_on_unexpected_login_reply():
    client, sock, _ = make_client("admin\npassword\n", ["WHAT"])
    client.run()
    assert sock.messages == ["admin", "password"]


def test_main_rejects_bad_address(capsys):
    assert main(["not-an-address", "5000"]) == 1
    assert "ao converter endereço" in capsys.readouterr().out
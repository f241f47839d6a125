import pytest

from turmas import users
from turmas.errors import Rejected
from turmas.users import User, UserStore, UserType, parse_user_line

CONFIG = (
    "ana;password;aluno\n"
    "rui;secret;professor\n"
    "admin;password;administrador\n"
)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def store(config_path):
    return UserStore.load(config_path)


def test_parse_user_line_fields():
    user = parse_user_line("ana;password;aluno\n")
    assert user == User("ana", "password", "aluno")


def test_parse_user_line_truncates_like_the_file_format():
    user = parse_user_line("u" * 80 + ";password;" + "t" * 40)
    assert len(user.username) == users.MAX_USERNAME_LENGTH - 1
    assert len(user.user_type) == users.MAX_TYPE_LENGTH - 1


def test_parse_user_line_takes_first_type_word():
    assert parse_user_line("ana;password;aluno extra").user_type == "aluno"


@pytest.mark.parametrize("line", ["ana;password", "ana", ";password;aluno", "ana;password;  "])
def test_parse_user_line_rejects_malformed(line):
    with pytest.raises(ValueError):
        parse_user_line(line)


def test_load_reads_all_users(store):
    assert [u.username for u in store] == ["ana", "rui", "admin"]
    assert len(store) == 3


def test_load_skips_blank_lines(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text("\nana;password;aluno\n\n", encoding="utf-8")
    assert [u.username for u in UserStore.load(path)] == ["ana"]


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        UserStore.load(tmp_path / "absent.txt")


def test_authenticate_matches_both_credentials(store):
    user = store.authenticate("rui", "secret")
    assert user.user_type == UserType.PROFESSOR.value
    assert store.authenticate("rui", "password") is None
    assert store.authenticate("nobody", "secret") is None


def test_is_admin(store):
    assert store.authenticate("admin", "password").is_admin
    assert not store.authenticate("ana", "password").is_admin


def test_add_persists_to_file(store, config_path):
    added = store.add("eva", "password", UserType.PROFESSOR)
    assert added.user_type == "professor"
    reloaded = UserStore.load(config_path)
    assert reloaded.authenticate("eva", "password") == added
    assert len(reloaded) == 4


def test_add_existing_user_is_rejected(store, config_path):
    with pytest.raises(Rejected) as info:
        store.add("ana", "secret", "aluno")
    assert info.value.reply() == "REJECTED (ALREADY EXISTS)\n"
    assert config_path.read_text(encoding="utf-8") == CONFIG


def test_remove_rewrites_file(store, config_path):
    removed = store.remove("rui")
    assert removed.username == "rui"
    reloaded = UserStore.load(config_path)
    assert [u.username for u in reloaded] == ["ana", "admin"]


def test_remove_missing_user_is_rejected(store):
    with pytest.raises(Rejected) as info:
        store.remove("nobody")
    assert info.value.reason == "NOT FOUND"
    assert len(store) == 3


def test_listing_lists_users(store):
    text = store.listing()
    assert text.startswith(users.LISTING_HEADER)
    body = text[len(users.LISTING_HEADER):].splitlines()
    assert body == [
        "USER ana TYPE aluno",
        "USER rui TYPE professor",
        "USER admin TYPE administrador",
    ]


def test_listing_empty_is_rejected(tmp_path):
    empty = UserStore(tmp_path / "config.txt")
    with pytest.raises(Rejected) as info:
        empty.listing()
    assert info.value.reply() == "REJECTED (NO USERS)\n"


def test_listing_is_bounded(tmp_path):
    many = UserStore(
        tmp_path / "config.txt",
        [User(f"user{n:03d}", "password", "aluno") for n in range(100)],
    )
    assert len(many.listing()) == users.MAX_REPLY_LENGTH


def test_save_then_load_round_trip(tmp_path):
    path = tmp_path / "config.txt"
    original = [User("ana", "password", "aluno"), User("rui", "secret", "professor")]
    UserStore(path, original).save()
    assert list(UserStore.load(path)) == original
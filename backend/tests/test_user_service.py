"""
Tests for the user manager.

Covers registration, credential checks and changes, the reset flow,
and removal with reference cleanup.
"""

import pytest

from brainwave.models.message import Message
from brainwave.models.topic import Topic
from brainwave.services.errors import (
    DuplicateIdentityError,
    EmailInUseError,
    ErrorKind,
    InvalidInputError,
    InvalidResetCodeError,
    InvalidUsernameError,
    UserNotFoundError,
    UsernameInUseError,
    WrongPasswordError,
)
from brainwave.services.user_service import validate_username


class TestValidateUsername:
    """Test username format rules."""

    @pytest.mark.parametrize("username", ["abc", "alice_01", "A" * 20, "___"])
    def test_valid(self, username):
        is_valid, error = validate_username(username)
        assert is_valid
        assert error is None

    @pytest.mark.parametrize("username", [
        "", "ab", "A" * 21, "bad-name", "with space", "ümlaut", "alice\n", "\nalice",
    ])
    def test_invalid(self, username):
        is_valid, error = validate_username(username)
        assert not is_valid
        assert error


class TestRegister:
    """Test user registration."""

    def test_register_creates_user(self, users):
        """New users start with zero counters and a hashed password."""
        user = users.register("alice", "alice@example.com", "password123")

        assert user.id is not None
        assert user.username == "alice"
        assert user.email == "alice@example.com"
        assert user.topics_opened == 0
        assert user.messages_sent == 0
        assert user.reset_code is None
        assert user.created_at is not None
        assert user.password_hash != "password123"
        assert user.password_hash.startswith("$2")

    def test_register_duplicate_username(self, users):
        """A taken username fails regardless of email."""
        users.register("alice", "alice@example.com", "pw")

        with pytest.raises(DuplicateIdentityError) as exc_info:
            users.register("alice", "other@example.com", "pw")

        assert exc_info.value.kind == ErrorKind.DUPLICATE

    def test_register_duplicate_email(self, users):
        users.register("alice", "shared@example.com", "pw")

        with pytest.raises(DuplicateIdentityError):
            users.register("bob", "shared@example.com", "pw")

    def test_register_invalid_username(self, users):
        with pytest.raises(InvalidUsernameError) as exc_info:
            users.register("a!", "a@example.com", "pw")

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_register_rejects_trailing_newline(self, users):
        with pytest.raises(InvalidUsernameError):
            users.register("alice\n", "a@example.com", "pw")

        assert users.list_all() == []

    def test_register_race_on_username(self, db, users, monkeypatch):
        """A conflict that slips past the pre-check is still a duplicate."""
        users.register("alice", "alice@example.com", "pw")

        class NoMatch:
            def filter(self, *args):
                return self

            def first(self):
                return None

        monkeypatch.setattr(db, "query", lambda *args: NoMatch())

        with pytest.raises(DuplicateIdentityError) as exc_info:
            users.register("alice", "other@example.com", "pw")

        monkeypatch.undo()
        assert exc_info.value.kind == ErrorKind.DUPLICATE
        assert [u.email for u in users.list_all()] == ["alice@example.com"]

    def test_register_requires_email_and_password(self, users):
        with pytest.raises(InvalidInputError):
            users.register("alice", "", "pw")
        with pytest.raises(InvalidInputError):
            users.register("alice", "alice@example.com", "")

    def test_register_rejects_overlong_password(self, users):
        with pytest.raises(InvalidInputError):
            users.register("alice", "alice@example.com", "x" * 73)

    def test_salts_differ(self, users):
        """The same password hashes differently for different users."""
        alice = users.register("alice", "alice@example.com", "same")
        bob = users.register("bob", "bob@example.com", "same")

        assert alice.password_hash != bob.password_hash


class TestVerifyCredentials:
    """Test credential verification."""

    def test_correct_pair(self, users):
        users.register("alice", "alice@example.com", "secret")
        assert users.verify_credentials("alice", "secret") is True

    def test_wrong_password(self, users):
        users.register("alice", "alice@example.com", "secret")
        assert users.verify_credentials("alice", "wrong") is False

    def test_unknown_user(self, users):
        """Unknown usernames look the same as wrong passwords."""
        assert users.verify_credentials("nobody", "secret") is False


class TestChangeCredentials:
    """Test password, email and username changes."""

    def test_change_password(self, users):
        """After a change the old password fails and the new one works."""
        users.register("alice", "alice@example.com", "old_pw")

        users.change_password("alice", "old_pw", "new_pw")

        assert users.verify_credentials("alice", "old_pw") is False
        assert users.verify_credentials("alice", "new_pw") is True

    def test_change_password_wrong_current(self, users):
        users.register("alice", "alice@example.com", "old_pw")

        with pytest.raises(WrongPasswordError) as exc_info:
            users.change_password("alice", "not_it", "new_pw")

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert users.verify_credentials("alice", "old_pw") is True

    def test_change_password_unknown_user(self, users):
        with pytest.raises(UserNotFoundError):
            users.change_password("nobody", "a", "b")

    def test_change_email(self, users):
        users.register("alice", "alice@example.com", "pw")

        user = users.change_email("alice", "alice@new.example.com")

        assert user.email == "alice@new.example.com"

    def test_change_email_taken_by_other(self, users):
        users.register("alice", "alice@example.com", "pw")
        users.register("bob", "bob@example.com", "pw")

        with pytest.raises(EmailInUseError) as exc_info:
            users.change_email("alice", "bob@example.com")

        assert exc_info.value.kind == ErrorKind.DUPLICATE

    def test_change_email_to_own_email(self, users):
        """Re-submitting the current email is a conflict too."""
        users.register("alice", "alice@example.com", "pw")

        with pytest.raises(EmailInUseError):
            users.change_email("alice", "alice@example.com")

    def test_change_username(self, users):
        users.register("alice", "alice@example.com", "pw")

        user = users.change_username("alice", "alicia")

        assert user.username == "alicia"
        assert users.verify_credentials("alicia", "pw") is True
        with pytest.raises(UserNotFoundError):
            users.get("alice")

    def test_change_username_to_self_fails(self, users):
        """Renaming to the name just taken is a self-duplicate."""
        users.register("alice", "alice@example.com", "pw")
        users.change_username("alice", "bobby")

        with pytest.raises(UsernameInUseError):
            users.change_username("bobby", "bobby")

    def test_change_username_taken(self, users):
        users.register("alice", "alice@example.com", "pw")
        users.register("bob", "bob@example.com", "pw")

        with pytest.raises(UsernameInUseError):
            users.change_username("alice", "bob")

    def test_change_username_invalid_format(self, users):
        users.register("alice", "alice@example.com", "pw")

        with pytest.raises(InvalidUsernameError):
            users.change_username("alice", "no")
        with pytest.raises(InvalidUsernameError):
            users.change_username("alice", "has-dash")
        with pytest.raises(InvalidUsernameError):
            users.change_username("alice", "bob\n")


class TestPasswordReset:
    """Test the reset code flow."""

    def test_issue_code(self, users):
        users.register("alice", "alice@example.com", "pw")

        code = users.issue_password_reset_code("alice@example.com")

        assert len(code) == 6 and code.isdigit()
        assert users.get("alice").reset_code == code

    def test_issue_code_unknown_email(self, users):
        with pytest.raises(UserNotFoundError) as exc_info:
            users.issue_password_reset_code("nobody@example.com")

        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_new_code_overwrites_old(self, users, monkeypatch):
        users.register("alice", "alice@example.com", "pw")
        codes = iter(["111111", "222222"])
        monkeypatch.setattr(
            "brainwave.services.user_service.generate_reset_code", lambda: next(codes)
        )

        users.issue_password_reset_code("alice@example.com")
        users.issue_password_reset_code("alice@example.com")

        assert users.get("alice").reset_code == "222222"

    def test_reset_password(self, users):
        users.register("alice", "alice@example.com", "old_pw")
        code = users.issue_password_reset_code("alice@example.com")

        users.reset_password("alice@example.com", code, "new_pw")

        assert users.verify_credentials("alice", "new_pw") is True
        assert users.verify_credentials("alice", "old_pw") is False
        assert users.get("alice").reset_code is None

    def test_reset_code_is_single_use(self, users):
        users.register("alice", "alice@example.com", "pw")
        code = users.issue_password_reset_code("alice@example.com")
        users.reset_password("alice@example.com", code, "new_pw")

        with pytest.raises(InvalidResetCodeError):
            users.reset_password("alice@example.com", code, "another_pw")

    def test_reset_with_unknown_code(self, users):
        users.register("alice", "alice@example.com", "pw")

        with pytest.raises(InvalidResetCodeError) as exc_info:
            users.reset_password("alice@example.com", "123456", "new_pw")

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_reset_with_malformed_code(self, users):
        with pytest.raises(InvalidResetCodeError):
            users.reset_password("alice@example.com", "abc", "new_pw")


class TestRemoveAndList:
    """Test removal and listing."""

    def test_list_all(self, users):
        users.register("alice", "alice@example.com", "pw")
        users.register("bob", "bob@example.com", "pw")

        names = [u.username for u in users.list_all()]

        assert names == ["alice", "bob"]

    def test_remove_user(self, users):
        users.register("alice", "alice@example.com", "pw")

        users.remove("alice")

        assert users.list_all() == []
        assert users.verify_credentials("alice", "pw") is False

    def test_remove_unknown_user(self, users):
        with pytest.raises(UserNotFoundError):
            users.remove("nobody")

    def test_remove_orphans_content(self, db, users, topics, messages):
        """Removing a user nulls their references but keeps the content."""
        users.register("alice", "alice@example.com", "pw")
        users.register("bob", "bob@example.com", "pw")
        topic = topics.create("Alice's topic", "alice")
        topic_id = topic.id
        alice_message = messages.create("Alice's topic", "by alice", "alice")
        alice_message_id = alice_message.id
        messages.create("Alice's topic", "by bob", "bob")

        users.remove("alice")

        kept_topic = db.query(Topic).filter(Topic.id == topic_id).one()
        assert kept_topic.creator_id is None
        kept_message = db.query(Message).filter(Message.id == alice_message_id).one()
        assert kept_message.user_id is None
        assert kept_message.body == "by alice"
        assert db.query(Message).filter(Message.topic_id == topic_id).count() == 2
        assert db.query(Message).filter(Message.user_id.isnot(None)).count() == 1

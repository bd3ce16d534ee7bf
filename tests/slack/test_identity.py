"""UserDirectory 테스트"""

from unittest.mock import MagicMock

import pytest

from bugbridge.slack.identity import IdentityError, UserDirectory


class TestLoad:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "users.yaml"
        path.write_text(
            "users:\n"
            "  - slack: Alice@Example.com\n"
            "    bugzilla: alice@redhat.com\n"
            "  - slack: bob@example.com\n",
            encoding="utf-8",
        )

        users = UserDirectory.load(path)

        assert len(users) == 1
        assert users.to_bugzilla("alice@example.com") == "alice@redhat.com"

    def test_missing_file_is_empty(self, tmp_path):
        users = UserDirectory.load(tmp_path / "nope.yaml")
        assert len(users) == 0

    def test_empty_file(self, tmp_path):
        path = tmp_path / "users.yaml"
        path.write_text("", encoding="utf-8")
        assert len(UserDirectory.load(path)) == 0


class TestToBugzilla:
    def test_unmapped_email_passes_through(self):
        users = UserDirectory({"a@example.com": "a@redhat.com"})
        assert users.to_bugzilla("c@example.com") == "c@example.com"


class TestResolve:
    def test_resolve(self):
        client = MagicMock()
        client.users_profile_get.return_value = {"profile": {"email": "a@example.com"}}
        users = UserDirectory({"a@example.com": "a@redhat.com"})

        assert users.resolve(client, "U1") == "a@redhat.com"
        client.users_profile_get.assert_called_once_with(user="U1")

    def test_profile_call_fails(self):
        client = MagicMock()
        client.users_profile_get.side_effect = Exception("user_not_found")

        with pytest.raises(IdentityError, match="user_not_found"):
            UserDirectory().resolve(client, "U1")

    def test_no_email(self):
        client = MagicMock()
        client.users_profile_get.return_value = {"profile": {"real_name": "Alice"}}

        with pytest.raises(IdentityError):
            UserDirectory().resolve(client, "U1")

"""Property and unit tests for credential resolution."""

from unittest.mock import Mock

import pytest
from hypothesis import given, settings, strategies as st

from ew_signer.core.errors import CredentialMissing
from ew_signer.credentials import CredentialProvider

values = st.one_of(st.none(), st.text(alphabet="abcxyz@.0123", min_size=1, max_size=12))


def write_env(path, username=None, password=None):
    lines = []
    if username:
        lines.append(f"EW_USERNAME={username}")
    if password:
        lines.append(f"EW_PASSWORD={password}")
    path.write_text("\n".join(lines) + "\n")
    return path


def answering_prompter():
    return Mock(side_effect=lambda message, password: f"prompted-{'password' if password else 'username'}")


class TestCredentialProvider:
    """Test cases for CredentialProvider."""

    def test_flags_only_never_prompt(self):
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve(username="a@b.com", password="secret")

        assert credentials.username == "a@b.com"
        assert credentials.password.get_secret_value() == "secret"
        prompter.assert_not_called()

    def test_flags_override_env_file(self, tmp_path):
        env_file = write_env(tmp_path / ".env", "env@b.com", "env-secret")
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve(
            username="flag@b.com", password=None, env_file=env_file
        )

        assert credentials.username == "flag@b.com"
        assert credentials.password.get_secret_value() == "env-secret"
        prompter.assert_not_called()

    def test_env_file_overrides_prompt(self, tmp_path):
        env_file = write_env(tmp_path / ".env", "env@b.com", "env-secret")
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve(env_file=env_file)

        assert credentials.username == "env@b.com"
        prompter.assert_not_called()

    def test_prompts_once_per_missing_field(self, tmp_path):
        env_file = write_env(tmp_path / ".env", username="env@b.com")
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve(env_file=env_file)

        assert credentials.username == "env@b.com"
        assert credentials.password.get_secret_value() == "prompted-password"
        prompter.assert_called_once_with("Extension Warehouse password", True)

    def test_prompts_for_both_without_sources(self):
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve()

        assert prompter.call_count == 2
        assert credentials.username == "prompted-username"

    def test_unreadable_env_file(self, tmp_path):
        with pytest.raises(CredentialMissing):
            CredentialProvider(answering_prompter()).resolve(env_file=tmp_path / "missing.env")

    def test_empty_answer(self):
        with pytest.raises(CredentialMissing) as exc_info:
            CredentialProvider(Mock(return_value="")).resolve(password="secret")

        assert exc_info.value.field == "username"

    def test_prompting_disabled(self):
        with pytest.raises(CredentialMissing):
            CredentialProvider(prompter=None).resolve(username="a@b.com")

    @given(flag_user=values, flag_pass=values, env_user=values, env_pass=values)
    @settings(max_examples=60, deadline=None)
    def test_precedence_property(self, tmp_path_factory, flag_user, flag_pass, env_user, env_pass):
        env_file = write_env(tmp_path_factory.mktemp("env") / ".env", env_user, env_pass)
        prompter = answering_prompter()

        credentials = CredentialProvider(prompter).resolve(
            username=flag_user, password=flag_pass, env_file=env_file
        )

        assert credentials.username == (flag_user or env_user or "prompted-username")
        assert credentials.password.get_secret_value() == (flag_pass or env_pass or "prompted-password")
        expected_prompts = [not (flag_user or env_user), not (flag_pass or env_pass)].count(True)
        assert prompter.call_count == expected_prompts

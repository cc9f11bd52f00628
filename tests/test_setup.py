"""Tests for the setup wizard."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from itaulink_uy.errors import AuthError
from itaulink_uy.setup import mask_document, run_setup, show_current_config


class TestMaskDocument:
    """Tests for mask_document function."""

    def test_masks_all_but_last_three(self) -> None:
        """Test long document numbers are masked."""
        assert mask_document("12345678") == "*****678"

    def test_short_value_unchanged(self) -> None:
        """Test short values are shown as-is."""
        assert mask_document("123") == "123"


class TestRunSetup:
    """Tests for run_setup function."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    @patch("itaulink_uy.setup.verify_credentials", return_value=2)
    @patch("itaulink_uy.setup.getpass.getpass", return_value="secret")
    @patch("builtins.input", return_value="12345678")
    def test_saves_encoded_password(
        self,
        mock_input: MagicMock,
        mock_getpass: MagicMock,
        mock_verify: MagicMock,
        tmp_path: Path,
    ) -> None:
        """Test the wizard stores the id and the encoded password."""
        config_path = tmp_path / "config.json"

        run_setup(config_path=config_path)

        saved = json.loads(config_path.read_text())
        assert saved["itau"]["id"] == "12345678"
        assert saved["itau"]["password"] == "c2VjcmV0"
        creds = mock_verify.call_args.args[0]
        assert creds.password == "secret"

    @patch("itaulink_uy.setup.verify_credentials", side_effect=AuthError("Bad password", "10020"))
    @patch("itaulink_uy.setup.getpass.getpass", return_value="wrong")
    @patch("builtins.input", return_value="12345678")
    def test_failed_login_not_saved(
        self,
        mock_input: MagicMock,
        mock_getpass: MagicMock,
        mock_verify: MagicMock,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test nothing is written when the credentials are rejected."""
        config_path = tmp_path / "config.json"

        run_setup(config_path=config_path)

        assert not config_path.exists()
        assert "Bad password" in capsys.readouterr().out

    @patch("itaulink_uy.setup.getpass.getpass", return_value="secret")
    @patch("builtins.input", return_value="")
    def test_keeps_existing_id(
        self, mock_input: MagicMock, mock_getpass: MagicMock, tmp_path: Path
    ) -> None:
        """Test an empty answer keeps the stored document number."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"itau": {"id": "87654321", "password": "eA=="}}))

        run_setup(config_path=config_path, verify=False)

        saved = json.loads(config_path.read_text())
        assert saved["itau"]["id"] == "87654321"
        assert saved["itau"]["password"] == "c2VjcmV0"

    @patch("itaulink_uy.setup.getpass.getpass", return_value="")
    @patch("builtins.input", return_value="12345678")
    def test_empty_password_aborts(
        self, mock_input: MagicMock, mock_getpass: MagicMock, tmp_path: Path
    ) -> None:
        """Test setup stops without a password."""
        config_path = tmp_path / "config.json"

        run_setup(config_path=config_path, verify=False)

        assert not config_path.exists()


class TestShowCurrentConfig:
    """Tests for show_current_config function."""

    def test_not_configured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test output when no credentials are stored."""
        show_current_config({})
        assert "Not configured" in capsys.readouterr().out
